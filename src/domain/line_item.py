"""Line Item Value Object and Sanitizer

Line items are stored inside their owning estimate or invoice as a JSON
array. Everything that reaches storage goes through ``sanitize_line_items``
first: only rows with a description and a positive quantity survive, and
every row total is recomputed from quantity and rate.
"""

import json
import logging
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, List, Optional
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")
MAX_NUMERIC = Decimal("1000000000000")

QUANTITY_KEYS = ("quantity", "qty")
RATE_KEYS = ("rate", "unit_price", "unitPrice")


class LineItemIntegrityError(Exception):
    """Sanitized line items did not survive a serialization round trip"""


class LineItem(BaseModel):
    """
    LineItem - One priced row of an estimate or invoice

    Domain Rules:
    - description is non-empty
    - quantity > 0, rate >= 0
    - total = round(quantity * rate, 2), never taken from input
    """

    id: str = Field(..., description="Row identifier, stable across edits")
    description: str = Field(..., min_length=1, description="What is being priced")
    quantity: Decimal = Field(..., gt=0, description="Number of units")
    rate: Decimal = Field(..., ge=0, description="Price per unit")
    total: Decimal = Field(..., description="quantity * rate rounded to cents")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "id": "item_0",
                "description": "Interior paint - living room",
                "quantity": "2",
                "rate": "50.00",
                "total": "100.00",
            }
        }


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value: Any) -> Decimal:
    """
    Coerce user input to a finite Decimal

    Missing, boolean, non-numeric, NaN, infinite and absurdly large values
    all become 0.
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            return ZERO
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return ZERO
        try:
            number = Decimal(text)
        except InvalidOperation:
            return ZERO
    else:
        return ZERO

    if not number.is_finite() or abs(number) > MAX_NUMERIC:
        return ZERO
    return number


def _first_present(data: Mapping, keys: tuple) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _coerce_to_list(raw: Any) -> list:
    if raw is None:
        return []

    if isinstance(raw, (list, tuple)):
        return list(raw)

    if isinstance(raw, str):
        if not raw.strip():
            return []
        try:
            parsed = json.loads(raw)
        except ValueError:
            logger.debug("Line items string is not valid JSON, treating as empty")
            return []
        return parsed if isinstance(parsed, list) else []

    return []


def _clean_item(raw_item: Any, index: int) -> Optional[LineItem]:
    if isinstance(raw_item, LineItem):
        data = raw_item.model_dump()
    elif isinstance(raw_item, Mapping):
        data = raw_item
    else:
        return None

    raw_description = data.get("description")
    description = "" if raw_description is None else str(raw_description).strip()

    quantity = to_decimal(_first_present(data, QUANTITY_KEYS))
    rate = to_decimal(_first_present(data, RATE_KEYS))
    if rate < 0:
        rate = ZERO

    if not description or quantity <= 0:
        return None

    raw_id = data.get("id")
    item_id = raw_id.strip() if isinstance(raw_id, str) else ""

    return LineItem(
        id=item_id or f"item_{index}",
        description=description,
        quantity=quantity,
        rate=rate,
        total=quantize_money(quantity * rate),
    )


def line_items_to_storage(items: List[LineItem]) -> List[dict]:
    """Plain JSON-safe dicts; numbers are kept as decimal strings"""
    return [
        {
            "id": item.id,
            "description": item.description,
            "quantity": str(item.quantity),
            "rate": str(item.rate),
            "total": str(item.total),
        }
        for item in items
    ]


def _verify_round_trip(items: List[LineItem]) -> None:
    storage = line_items_to_storage(items)
    try:
        round_tripped = json.loads(json.dumps(storage))
    except (TypeError, ValueError) as e:
        raise LineItemIntegrityError(f"Line items are not JSON serializable: {e}") from e

    if round_tripped != storage:
        raise LineItemIntegrityError("Line items changed during serialization round trip")


def sanitize_line_items(raw: Any) -> List[LineItem]:
    """
    Normalize raw line items into their canonical form

    Args:
        raw: list of mappings, JSON-encoded string, or None

    Returns:
        List of valid LineItem rows (possibly empty)

    Raises:
        LineItemIntegrityError: if the result does not survive a JSON round trip
    """
    items = []
    for index, raw_item in enumerate(_coerce_to_list(raw)):
        item = _clean_item(raw_item, index)
        if item is not None:
            items.append(item)

    _verify_round_trip(items)
    return items


def subtotal(items: List[LineItem]) -> Decimal:
    return quantize_money(sum((item.total for item in items), ZERO))


def document_total(items: List[LineItem], tax_rate: Decimal) -> Decimal:
    """subtotal * (1 + tax_rate / 100), rounded to cents"""
    multiplier = Decimal("1") + to_decimal(tax_rate) / Decimal("100")
    return quantize_money(subtotal(items) * multiplier)
