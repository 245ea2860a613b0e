from __future__ import annotations
import json
import re
from typing import Any, Optional


_DELIMITED_RE = re.compile(r"\s*[;,]\s*")
_KW_RE = re.compile(r"([0-9]{2,4})\s*kW", re.IGNORECASE)
_HP_RE = re.compile(r"\(([0-9]{2,4})\s*hp\)", re.IGNORECASE)

METRIC = "metric"
IMPERIAL = "imperial"


def to_text(value: Any) -> str:
    """Stringify a scraped value the way it should appear in an exported cell."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        # Excel/JSON numbers: 39900.0 -> '39900'
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, (list, dict)):
        return to_json(value)
    return str(value)


def to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def coerce_to_list(value: Any) -> list:
    """Turn an array, JSON string or delimited string into a list.

    - None -> []
    - list -> returned unchanged
    - dict -> [dict]
    - JSON array string -> parsed list; JSON object string -> [object]
    - other JSON (numbers, quoted strings, null) -> []
    - anything else is split on ';' or ',' when present, else [trimmed string]
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        return [value]
    text = to_text(value).strip()
    if not text:
        return []
    try:
        parsed = json.loads(text)
    except ValueError:
        if _DELIMITED_RE.search(text):
            return [p for p in _DELIMITED_RE.split(text) if p]
        return [text]
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict):
        return [parsed]
    # JSON scalars ("2020", "\"ABS\"", "null") carry no list
    return []


def parse_json_object(value: Any) -> Optional[dict]:
    if isinstance(value, dict):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = json.loads(value)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def extract_digits(value: Any) -> str:
    """'1,969 ccm' -> '1969'. Empty for None or values without digits."""
    if value is None:
        return ""
    return "".join(re.findall(r"[0-9]+", to_text(value)))


def extract_paired_unit(value: Any, unit: str = METRIC) -> str:
    """Pick one half of a '195 kW (265 hp)' power rating.

    unit='metric' returns the kW number, unit='imperial' the hp number
    inside the parentheses.
    """
    if value is None:
        return ""
    text = to_text(value)
    if unit == METRIC:
        m = _KW_RE.search(text)
    elif unit == IMPERIAL:
        m = _HP_RE.search(text)
    else:
        return ""
    return m.group(1) if m else ""


def lookup_field(record: Any, path: str) -> Any:
    """Read a flat key, falling back to a nested walk of 'a/b/0' style paths."""
    if not isinstance(record, dict):
        return None
    if path in record:
        return record[path]
    if "/" not in path:
        return None
    cur: Any = record
    for part in path.split("/"):
        if isinstance(cur, str):
            # nested JSON-encoded objects, e.g. dealerDetails
            cur = parse_json_object(cur)
        if isinstance(cur, dict):
            cur = cur.get(part)
        elif isinstance(cur, list) and part.isdigit() and int(part) < len(cur):
            cur = cur[int(part)]
        else:
            return None
        if cur is None:
            return None
    return cur
