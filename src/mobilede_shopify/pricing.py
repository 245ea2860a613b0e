from __future__ import annotations
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

from .coerce import to_text


# amount * 1.21 / 1.19 before commission
VAT_TARGET = Decimal("1.21")
VAT_SOURCE = Decimal("1.19")

# (upper bound exclusive, commission) on the original amount
COMMISSION_TIERS = (
    (Decimal("25000"), Decimal("0.095")),
    (Decimal("40000"), Decimal("0.075")),
    (Decimal("60000"), Decimal("0.065")),
    (Decimal("90000"), Decimal("0.055")),
    (Decimal("250000"), Decimal("0.045")),
)
TOP_COMMISSION = Decimal("0.035")

_CENTS = Decimal("0.01")


def source_amount(record: Any) -> str:
    """First non-empty of price.amount, price.total.amount, price.value, price/total/amount."""
    if not isinstance(record, dict):
        return ""
    price = record.get("price")
    if isinstance(price, dict):
        if price.get("amount"):
            return to_text(price["amount"])
        total = price.get("total")
        if isinstance(total, dict) and total.get("amount"):
            return to_text(total["amount"])
        if price.get("value"):
            return to_text(price["value"])
    if record.get("price/total/amount"):
        return to_text(record["price/total/amount"])
    return ""


def parse_amount(text: Any) -> Optional[Decimal]:
    """'15,873.11' -> 15873.11, '15873,11' -> 15873.11, '€ 39900' -> 39900."""
    cleaned = re.sub(r"\s+", "", to_text(text))
    cleaned = re.sub(r"[€£$]", "", cleaned)
    if not cleaned:
        return None
    if "," in cleaned and "." in cleaned:
        cleaned = cleaned.replace(",", "")
    elif "," in cleaned:
        cleaned = cleaned.replace(",", ".")
    m = re.search(r"[0-9.]+", cleaned)
    if m:
        cleaned = m.group(0)
    # leading numeric prefix only: '1.2.3' -> 1.2
    m = re.match(r"[0-9]*\.?[0-9]*", cleaned)
    number = m.group(0) if m else ""
    if not re.search(r"[0-9]", number):
        return None
    return Decimal(number)


def commission_rate(amount: Decimal) -> Decimal:
    for upper, rate in COMMISSION_TIERS:
        if amount < upper:
            return rate
    return TOP_COMMISSION


def format_price(value: Decimal) -> str:
    # 22268.10 -> '22268.1', 22300.00 -> '22300'
    return format(value.quantize(_CENTS, rounding=ROUND_HALF_UP).normalize(), "f")


def adjusted_price(amount: Decimal) -> str:
    price = amount * VAT_TARGET / VAT_SOURCE
    price = price * (1 + commission_rate(amount))
    return format_price(price)


def variant_price(record: Any) -> str:
    """Selling price for the catalogue, or '' when no positive amount is found."""
    amount = parse_amount(source_amount(record))
    if amount is None or amount <= 0:
        return ""
    try:
        return adjusted_price(amount)
    except InvalidOperation:
        # too many digits to round to cents
        return ""


def price_without_vat(record: Any) -> str:
    if not isinstance(record, dict):
        return ""
    value: Any = ""
    price = record.get("price")
    if isinstance(price, dict) and isinstance(price.get("withoutVAT"), dict):
        value = price["withoutVAT"].get("amount") or ""
    if not value and "price/withoutVAT/amount" in record:
        value = record["price/withoutVAT/amount"]
    return to_text(value or "")
