"""
Payment Service - UPI deep links and QR codes

Customers pay with any UPI app by scanning the QR (or tapping the link on
mobile), then confirm the payment with their transaction reference.
"""

import base64
import io
from typing import Optional
from urllib.parse import urlencode, quote

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from app.core.config import settings
from app.models.order import Order


def _quote_keep_at(value, safe="", encoding=None, errors=None):
    return quote(value, safe="@" + safe, encoding=encoding, errors=errors)


def build_upi_link(
    amount: float,
    order_number: str,
    upi_id: Optional[str] = None,
    payee_name: Optional[str] = None,
) -> str:
    """upi://pay link with payee, amount in INR and the order as the note"""
    params = {
        "pa": upi_id or settings.UPI_ID,
        "pn": payee_name or settings.UPI_PAYEE_NAME,
        "am": f"{amount:.2f}",
        "cu": "INR",
        "tn": f"Order-{order_number}",
    }
    # pa= carries the VPA with a literal @
    return f"upi://pay?{urlencode(params, quote_via=_quote_keep_at)}"


def generate_qr_base64(data: str, box_size: Optional[int] = None) -> str:
    """
    Generate QR code as base64-encoded PNG.

    Args:
        data: The data to encode in the QR code
        box_size: Pixels per QR module

    Returns:
        Base64-encoded PNG image string
    """
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_M,
        box_size=box_size or settings.UPI_QR_BOX_SIZE,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("utf-8")


def payment_details(order: Order) -> dict:
    """Everything the payment page needs for an order"""
    upi_link = build_upi_link(order.total_amount, order.order_number)
    return {
        "order_id": order.id,
        "order_number": order.order_number,
        "amount": order.total_amount,
        "payment_status": order.payment_status,
        "upi_id": settings.UPI_ID,
        "payee_name": settings.UPI_PAYEE_NAME,
        "upi_link": upi_link,
        "qr_code": generate_qr_base64(upi_link),
    }
