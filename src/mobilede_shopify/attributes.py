from __future__ import annotations
import re
from typing import Any, Dict

from .coerce import to_text
from .normalize import decode_attributes
from .translations import translate_attribute_name, translate_value


_LEADING_NUMBER_RE = re.compile(r"^[0-9][0-9,./]*")
_STARTS_WITH_DIGIT_RE = re.compile(r"[0-9]")


def _first_word(text: str) -> str:
    words = text.split()
    return words[0] if words else ""


def shorten_value(value: Any) -> str:
    """Reduce an attribute value to the short token shown in its own column.

    '1,395 ccm' -> '1,395', '0257E something' -> '0257E',
    'Cloth, Black' -> 'Cloth', 'Used vehicle' -> 'Used'.
    """
    if isinstance(value, list):
        value = value[0] if value else ""
    text = to_text(value).strip()

    if _STARTS_WITH_DIGIT_RE.match(text):
        token = _first_word(text)
        if re.search(r"[A-Za-z]", token):
            return token
        m = _LEADING_NUMBER_RE.match(text)
        return m.group(0) if m else text

    head, sep, tail = text.partition(",")
    if sep:
        tail = tail.strip()
        if tail and not _STARTS_WITH_DIGIT_RE.match(tail):
            short = _first_word(head.strip())
            if short:
                return short
    return _first_word(text)


def expand_attributes_to_columns(item: Any) -> Dict[str, str]:
    """One column per attribute, keyed by the translated attribute name.

    The first attribute that lands on a given column wins.
    """
    cols: Dict[str, str] = {}
    raw = item.get("attributes") if isinstance(item, dict) else None
    for attr in decode_attributes(raw):
        raw_name = attr.name.strip()
        if not raw_name:
            continue
        name = translate_attribute_name(raw_name)
        if name in cols:
            continue
        cols[name] = translate_value(shorten_value(attr.value), raw_name)
    return cols
