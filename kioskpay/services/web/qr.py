"""QR rendering for checkout links."""

import base64
from io import BytesIO

import qrcode


def qr_data_url(text: str) -> str:
    """PNG QR code for `text` as a `data:` URL suitable for an <img> tag."""

    qr = qrcode.QRCode(box_size=8, border=2)
    qr.add_data(text)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")
