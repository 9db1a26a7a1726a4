"""Order ID and receipt number helpers"""

import re
import secrets
import string
import time
from typing import Optional

ORDER_ID_PATTERN = re.compile(r"^order_\d{13}_[a-z0-9]{6,10}$")

_BASE36 = string.digits + string.ascii_lowercase


def generate_order_id() -> str:
    """
    Generate an order ID usable before the order is persisted.

    Format: order_<13-digit millisecond timestamp>_<8 base36 chars>,
    e.g. order_1753222065065_i3hwfxx7
    """
    timestamp = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(8))
    return f"order_{timestamp}_{suffix}"


def is_valid_order_id(order_id: str) -> bool:
    return bool(ORDER_ID_PATTERN.match(order_id))


def get_timestamp_from_order_id(order_id: str) -> Optional[int]:
    """Millisecond timestamp embedded in an order ID, or None"""
    parts = order_id.split("_")
    if len(parts) == 3 and parts[0] == "order" and parts[1].isdigit():
        return int(parts[1])
    return None


def generate_receipt_number(order_id: str) -> str:
    """
    Short customer-facing receipt number.

    order_1753222065065_i3hwfxx7w -> #5065-I3HW
    """
    parts = order_id.split("_")
    if len(parts) == 3 and parts[0] == "order":
        return f"#{parts[1][-4:]}-{parts[2][:4].upper()}"

    # Non-standard IDs still get something printable
    fallback = "".join(secrets.choice(_BASE36) for _ in range(4)).upper()
    return f"#{str(int(time.time() * 1000))[-4:]}-{fallback}"
