"""Printable purchase order"""
from logibot.core.pdf import DocumentGenerator, format_won
from logibot.core.utils import get_company_info

PO_HEADER = ['No.', 'Product', 'Current stock', 'Order qty', 'Unit price', 'Amount']


def generate_purchase_order_pdf(order):
    """Render a purchase order to a PDF buffer"""
    company = get_company_info()
    supplier = order.supplier
    info_lines = [
        f"Order number: {order.order_number}",
        f"Order date: {order.order_date:%Y-%m-%d}",
        f"Expected date: {order.expected_date:%Y-%m-%d}" if order.expected_date else '',
        f"Supplier: {supplier.business_name} ({supplier.business_number})" if supplier.business_number
        else f"Supplier: {supplier.business_name}",
        f"Contact: {supplier.contact_person} {supplier.contact_phone}".strip() if supplier.contact_person else '',
        f"Ordered by: {company['name']}  Tel {company['phone']}  Fax {company['fax']}",
    ]

    rows = []
    for index, item in enumerate(order.items.select_related('product'), start=1):
        current_stock = item.product.stock if item.product_id else '-'
        rows.append([
            str(index),
            item.product_name,
            str(current_stock),
            f"{item.quantity:,}",
            format_won(item.unit_price),
            format_won(item.subtotal),
        ])

    footer = [f"Notes: {order.notes}"] if order.notes else []
    return DocumentGenerator().build_document(
        title=f"Purchase Order {order.order_number}",
        info_lines=info_lines,
        header=PO_HEADER,
        rows=rows,
        total_lines=[f"Total: {format_won(order.total_amount)}"],
        numeric_columns=(2, 3, 4, 5),
        footer_lines=footer,
    )
