"""Helpers for order numbers and delivery address display"""
import secrets
import time
from typing import Any, Dict, Optional

BASE36_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def to_base36(value: int) -> str:
    """Non-negative integer to upper-case base36"""
    if value < 0:
        raise ValueError("base36 encoding needs a non-negative integer")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(BASE36_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_order_number(now_ms: Optional[int] = None) -> str:
    """FP-<epoch millis in base36>-<4 random base36 chars>"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(4))
    return f"FP-{to_base36(now_ms)}-{suffix}"


def format_delivery_address(address: Optional[Dict[str, Any]]) -> str:
    """One-line rendering of an address snapshot, 'N/A' when empty"""
    if not address:
        return "N/A"

    parts = []
    address_type = address.get("type")

    if address_type == "Hostel" and address.get("hostel_name"):
        parts.append(address["hostel_name"])
        if address.get("room_number"):
            parts.append(f"Room {address['room_number']}")
    elif address_type == "Department" and address.get("department_name"):
        parts.append(address["department_name"])
        if address.get("cabin_number"):
            parts.append(f"Cabin {address['cabin_number']}")
    elif address.get("building_name"):
        parts.append(address["building_name"])
        if address.get("floor_number"):
            parts.append(f"Floor {address['floor_number']}")

    if address.get("landmark"):
        parts.append(address["landmark"])

    return ", ".join(parts) if parts else "N/A"
