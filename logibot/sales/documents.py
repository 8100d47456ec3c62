"""Printable quotation"""
from logibot.core.pdf import DocumentGenerator, format_won
from logibot.core.utils import get_company_info

QUOTATION_HEADER = ['No.', 'Code', 'Product', 'Qty', 'Unit price', 'Amount']


def generate_quotation_pdf(quotation):
    company = get_company_info()
    info_lines = [
        f"Quotation number: {quotation.quotation_number}",
        f"Date: {quotation.quotation_date:%Y-%m-%d}",
        f"Valid until: {quotation.valid_until:%Y-%m-%d}",
        f"To: {quotation.customer_name}",
        '',
        f"From: {company['name']} (Business no. {company['business_number']})",
        f"CEO: {company['ceo']}" if company['ceo'] else '',
        f"Address: {company['address']}" if company['address'] else '',
        f"Tel {company['phone']}  Fax {company['fax']}",
    ]

    rows = [
        [str(index), item.product_code, item.product_name, f"{item.quantity:,}",
         format_won(item.unit_price), format_won(item.subtotal)]
        for index, item in enumerate(quotation.items.all(), start=1)
    ]

    footer = [f"Notes: {quotation.notes}"] if quotation.notes else []
    return DocumentGenerator().build_document(
        title=f"Quotation {quotation.quotation_number}",
        info_lines=info_lines,
        header=QUOTATION_HEADER,
        rows=rows,
        total_lines=[
            f"Supply amount: {format_won(quotation.supply_amount)}",
            f"VAT (10%): {format_won(quotation.vat_amount)}",
            f"Total: {format_won(quotation.total_amount)}",
        ],
        numeric_columns=(3, 4, 5),
        footer_lines=footer,
    )
