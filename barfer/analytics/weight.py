"""
Weight estimation.

estimate_weight_kg() is the only place that turns a line item into
kilograms; every report that shows kg goes through it.
"""

import logging
import re

logger = logging.getLogger(__name__)

BIG_DOG_WEIGHT_KG = 15.0

_WEIGHT_TOKEN = re.compile(r"(\d+(?:\.\d+)?)\s*KG", re.IGNORECASE)


def estimate_weight_kg(product_name: str, option_label: str) -> float | None:
    """
    Kilograms of one unit of a product option, or None if not weight-bearing.

    Rules (first match wins):
        1. "big dog" in the product name -> 15 kg, whatever the option says
        2. "complemento" in the product name -> None (supplements carry no weight)
        3. first "<number>KG" token in the option label -> that number
        4. otherwise None
    """
    name = (product_name or "").lower()
    if "big dog" in name:
        return BIG_DOG_WEIGHT_KG
    if "complemento" in name:
        return None
    match = _WEIGHT_TOKEN.search(option_label or "")
    if match:
        return float(match.group(1))
    return None


def option_quantity(option: dict) -> float:
    """Units ordered for an option; 1 when absent or malformed."""
    try:
        quantity = float(option.get("quantity", 1))
    except (TypeError, ValueError):
        return 1.0
    return quantity if quantity > 0 else 1.0


def line_item_weight_kg(item: dict) -> float:
    """Total kg of a line item (sum over its options, times quantity)."""
    if not isinstance(item, dict):
        return 0.0
    name = item.get("name") or ""
    total = 0.0
    for option in item.get("options") or []:
        if not isinstance(option, dict):
            continue
        weight = estimate_weight_kg(name, option.get("name") or "")
        if weight is not None:
            total += weight * option_quantity(option)
    return total


def order_weight_kg(items: list) -> float:
    """Total kg of an order's items. Malformed items count as 0."""
    if not isinstance(items, list):
        logger.debug("Skipping non-list items payload: %r", type(items))
        return 0.0
    return sum(line_item_weight_kg(item) for item in items)
