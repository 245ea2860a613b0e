from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from typing import Any, List

from .coerce import coerce_to_list, parse_json_object, to_json, to_text


log = logging.getLogger(__name__)

MAX_INDEXED = 10

_PRICE_AMOUNT_RE = re.compile(r"[\d.,]+")
_PRICE_CURRENCY_RE = re.compile(r"[€$£]|RON|EUR|USD|GBP", re.IGNORECASE)


@dataclass(frozen=True)
class AttributeEntry:
    name: str
    value: Any


def slugify_for_handle(s: str) -> str:
    if not s:
        return ""
    s = re.sub(r"[^a-z0-9]+", "-", str(s).lower())
    return s.strip("-")


def build_handle(title: Any, record_id: Any) -> str:
    slug = slugify_for_handle(to_text(title).strip())
    id_str = slugify_for_handle(to_text(record_id).strip())
    if slug and id_str:
        return f"{slug}-{id_str}"
    return id_str or slug


def _is_entry_object(obj: Any) -> bool:
    return isinstance(obj, dict) and ("name" in obj or "key" in obj)


def decode_attributes(raw: Any) -> List[AttributeEntry]:
    """Decode the scraped `attributes` field into ordered name/value pairs.

    Accepted shapes, tried in this order:
    - a plain object (or JSON string of one): {"Power": "110 kW (150 hp)", ...}
    - an array of {name|key, value} objects (native or JSON-encoded)
    - delimited strings: "Fuel: Diesel; Power: 110 kW" or "a:b|c:d"
    """
    obj = parse_json_object(raw)
    if obj is not None:
        return [AttributeEntry(str(k), v) for k, v in obj.items()]

    items = coerce_to_list(raw)
    if not items:
        return []
    if _is_entry_object(items[0]):
        out = []
        for a in items:
            if not isinstance(a, dict):
                out.append(AttributeEntry("", ""))
                continue
            name = a.get("name") or a.get("key") or ""
            value = a.get("value")
            out.append(AttributeEntry(to_text(name), "" if value is None else value))
        return out

    out = []
    for s in items:
        if isinstance(s, dict):
            out.extend(AttributeEntry(str(k), v) for k, v in s.items())
            continue
        for kv in re.split(r"[;|]", to_text(s)):
            name, _, value = kv.partition(":")
            name, value = name.strip(), value.strip()
            if name or value:
                out.append(AttributeEntry(name, value))
    return out


def attribute_value_text(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(to_text(v) for v in value)
    return to_text(value)


def image_url(img: Any) -> str:
    if isinstance(img, dict):
        return to_text(img.get("url") or img.get("src") or "")
    return to_text(img)


def feature_name(feat: Any) -> str:
    if isinstance(feat, dict):
        return to_text(feat.get("name") or feat.get("title") or "")
    return to_text(feat)


def parse_dealer(raw: Any) -> dict:
    if raw is None or raw == "":
        return {}
    dealer = parse_json_object(raw)
    if dealer is None:
        log.debug(f"dealerDetails is not an object: {str(raw)[:80]!r}")
        return {}
    return dealer


def _split_price(price: Any):
    if isinstance(price, dict):
        amount = price.get("amount")
        if amount is None:
            amount = price.get("value")
        return to_text(amount), to_text(price.get("currency"))
    if isinstance(price, str):
        amount = _PRICE_AMOUNT_RE.search(price)
        currency = _PRICE_CURRENCY_RE.search(price)
        return (amount.group(0) if amount else ""), (currency.group(0) if currency else "")
    return "", ""


def normalize_item(item: Any = None) -> dict:
    """Flatten one scraped listing into plain string fields.

    Images, features and attributes are kept whole as JSON strings and
    the first ten of each are exposed as numbered columns.
    """
    if not isinstance(item, dict):
        item = {}
    out: dict = {}

    out["title"] = to_text(item.get("title"))
    out["url"] = to_text(item.get("url"))
    out["preview_image"] = to_text(item.get("previewImage"))

    out["price_amount"], out["price_currency"] = _split_price(item.get("price"))

    images = [image_url(img) for img in coerce_to_list(item.get("images"))]
    out["images_json"] = to_json(images)
    for idx, u in enumerate(images[:MAX_INDEXED], start=1):
        out[f"image_{idx}"] = u

    features = [feature_name(f) for f in coerce_to_list(item.get("features"))]
    out["features_json"] = to_json(features)
    for idx, f in enumerate(features[:MAX_INDEXED], start=1):
        out[f"feature_{idx}"] = f

    attrs = decode_attributes(item.get("attributes"))
    out["attributes_json"] = to_json([{"name": a.name, "value": a.value} for a in attrs])
    for idx, a in enumerate(attrs[:MAX_INDEXED], start=1):
        out[f"attribute_{idx}_name"] = a.name
        out[f"attribute_{idx}_value"] = attribute_value_text(a.value)

    dealer = parse_dealer(item.get("dealerDetails"))
    out["dealer_name"] = to_text(dealer.get("name") or "")
    out["dealer_city"] = to_text(dealer.get("city") or dealer.get("location") or "")
    out["dealer_phone"] = to_text(dealer.get("phone") or dealer.get("telephone") or "")

    out["source_id"] = to_text(item.get("id"))
    out["seller_id"] = to_text(item.get("sellerId"))
    out["segment"] = to_text(item.get("segment"))
    out["category"] = to_text(item.get("category"))
    out["rank"] = to_text(item.get("rank"))
    return out
