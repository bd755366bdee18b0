from __future__ import annotations

import io
from typing import BinaryIO

import qrcode
from PIL import Image

from ..core.exceptions import ValidationError


def render_qr_png(token: str) -> bytes:
    """PNG image of a tag token, for printing as a scan target."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(token)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def decode_qr_image(stream: BinaryIO) -> str:
    """Token from the first QR code found in an uploaded image."""
    # loads the zbar shared library on first use
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        img = Image.open(stream).convert("RGB")
    except OSError:
        raise ValidationError("Uploaded file is not a readable image")

    decoded = pyzbar_decode(img)
    if not decoded:
        raise ValidationError("No QR code found in the image")

    return token_from_payload(decoded[0].data)


def token_from_payload(data: bytes) -> str:
    try:
        token = data.decode("utf-8").strip()
    except UnicodeDecodeError:
        raise ValidationError("QR code does not contain a tag token")
    if not token:
        raise ValidationError("QR code is empty")
    return token
