"""
Local image generators for product labels, QR codes and price cards
Uses PIL/Pillow, python-barcode and qrcode, rendering into in-memory buffers
"""
import io
import json
import base64
import logging
from typing import Optional

from PIL import Image, ImageDraw, ImageFont
import barcode
from barcode.writer import ImageWriter
import qrcode
from django.utils import timezone

logger = logging.getLogger(__name__)

# Candidate fonts, first match wins. Nanum covers Hangul product names.
REGULAR_FONTS = [
    '/usr/share/fonts/truetype/nanum/NanumGothic.ttf',
    '/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf',
    'arial.ttf',
]
BOLD_FONTS = [
    '/usr/share/fonts/truetype/nanum/NanumGothicBold.ttf',
    '/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf',
    'arialbd.ttf',
]
MONO_FONTS = [
    '/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf',
    'cour.ttf',
]

PRICE_CARD_WIDTH = 800
PRICE_CARD_HEIGHT = 600
PRICE_CARD_QR_SIZE = 200
PRICE_CARD_QR_POSITION = (300, 400)


def load_font(candidates, size):
    """Load the first available TrueType font, falling back to Pillow's default"""
    for path in candidates:
        try:
            return ImageFont.truetype(path, size)
        except (OSError, IOError):
            continue
    return ImageFont.load_default(size=size)


def image_to_png(img: Image.Image) -> bytes:
    buffer = io.BytesIO()
    img.save(buffer, format='PNG', optimize=False, compress_level=1)
    data = buffer.getvalue()
    buffer.close()
    return data


def png_to_data_url(png: bytes) -> str:
    return f"data:image/png;base64,{base64.b64encode(png).decode('utf-8')}"


def build_qr_image(data: str, size: int, margin: int) -> Image.Image:
    """Render ``data`` as a black-on-white QR code scaled to ``size`` pixels"""
    qr = qrcode.QRCode(box_size=10, border=margin)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white").get_image().convert('RGB')
    return img.resize((size, size), Image.Resampling.NEAREST)


def qr_payload(code: str, name: str, timestamp: Optional[str] = None) -> str:
    """JSON payload encoded in product QR codes"""
    if timestamp is None:
        timestamp = timezone.now().isoformat()
    return json.dumps({'code': code, 'name': name, 'timestamp': timestamp}, ensure_ascii=False)


def generate_qr_code(code: str, name: str, width: int = 300, margin: int = 2) -> bytes:
    """PNG QR code identifying a product"""
    return image_to_png(build_qr_image(qr_payload(code, name), width, margin))


def generate_price_card(name: str, code: str, price, barcode_value: Optional[str] = None) -> bytes:
    """
    Generate an 800x600 shelf price card.

    Layout (text y values are baselines, horizontally centred):
      - 4px black border inset 10px
      - product name, bold 48px, y=80
      - "Code: {code}", 28px, y=130
      - price in red, bold 120px, y=280
      - barcode value, 32px monospace, y=350
      - 200x200 QR of "{code}|{name}|{barcode}" at (300, 400)

    If the QR cannot be rendered the card is returned without it.
    """
    if not barcode_value:
        barcode_value = code

    width, height = PRICE_CARD_WIDTH, PRICE_CARD_HEIGHT
    img = Image.new('RGB', (width, height), color='white')
    draw = ImageDraw.Draw(img)

    draw.rectangle([10, 10, width - 10, height - 10], outline='black', width=4)

    center_x = width // 2
    draw.text((center_x, 80), name, fill='black', font=load_font(BOLD_FONTS, 48), anchor='ms')
    draw.text((center_x, 130), f"Code: {code}", fill='black', font=load_font(REGULAR_FONTS, 28), anchor='ms')
    draw.text((center_x, 280), f"₩{int(price):,}", fill='#ff0000', font=load_font(BOLD_FONTS, 120), anchor='ms')
    draw.text((center_x, 350), barcode_value, fill='black', font=load_font(MONO_FONTS, 32), anchor='ms')

    try:
        qr_img = build_qr_image(f"{code}|{name}|{barcode_value}", PRICE_CARD_QR_SIZE, 1)
        img.paste(qr_img, PRICE_CARD_QR_POSITION)
    except Exception as e:
        logger.error(f"QR generation failed for price card {code}: {str(e)}")

    data = image_to_png(img)
    img.close()
    return data


def generate_label_image(
    product_name: str,
    barcode_value: str,
    width: int = 400,  # 4 inches at 100 DPI
    height: int = 200,  # 2 inches at 100 DPI
) -> bytes:
    """
    Generate a Code128 barcode label with the product name underneath.

    Args:
        product_name: Product name (truncated if too long)
        barcode_value: Value to encode, normally the product code
        width: Image width in pixels
        height: Image height in pixels

    Returns:
        PNG image bytes
    """
    max_name_length = 30
    if len(product_name) > max_name_length:
        product_name = product_name[:max_name_length] + '...'

    img = Image.new('RGB', (width, height), color='white')
    draw = ImageDraw.Draw(img)

    font_medium = load_font(REGULAR_FONTS, 14)
    font_small = load_font(REGULAR_FONTS, 12)

    margin = 10
    barcode_y = margin
    barcode_available_height = height - barcode_y - 45

    try:
        code128 = barcode.get_barcode_class('code128')
        barcode_instance = code128(barcode_value, writer=ImageWriter())
        barcode_img = barcode_instance.render({
            'write_text': False,
            'module_width': 0.3,
            'module_height': 20.0,
            'quiet_zone': 2.0,
            'font_size': 0,
            'text_distance': 0,
            'background': 'white',
            'foreground': 'black',
        })

        barcode_img_width, barcode_img_height = barcode_img.size

        # Fit width, then clamp to the available height keeping the aspect ratio
        barcode_width = width - (2 * margin)
        scale_factor = barcode_width / barcode_img_width
        scaled_height = int(barcode_img_height * scale_factor)
        if scaled_height > barcode_available_height:
            scale_factor = barcode_available_height / barcode_img_height
            scaled_height = barcode_available_height
            barcode_width = int(barcode_img_width * scale_factor)

        barcode_img = barcode_img.resize((barcode_width, scaled_height), Image.Resampling.BILINEAR)
        img.paste(barcode_img, ((width - barcode_width) // 2, barcode_y))
        text_y = barcode_y + scaled_height + 5
        draw.text((width // 2, text_y), barcode_value, fill='black', font=font_small, anchor='mt')
    except Exception as e:
        logger.error(f"Barcode generation failed for '{barcode_value}': {str(e)}")
        text_y = barcode_y
        draw.text((width // 2, text_y), f'BARCODE: {barcode_value}', fill='black', font=font_small, anchor='mt')

    draw.text((width // 2, text_y + 18), product_name, fill='black', font=font_medium, anchor='mt')

    data = image_to_png(img)
    img.close()
    return data
