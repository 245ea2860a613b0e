from __future__ import annotations
from typing import Any, List

from .coerce import coerce_to_list
from .normalize import decode_attributes, feature_name
from .translations import translate_attribute_name, translate_feature, translate_value_text


TECHNICAL_DATA_LABEL = "Date tehnice"
EQUIPMENT_LABEL = "Dotari"


def csv_html_escape(s: str) -> str:
    s = str(s)
    s = s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    return s


def feature_strings(record: Any) -> List[str]:
    if not isinstance(record, dict):
        return []
    feats = [feature_name(f) for f in coerce_to_list(record.get("features"))]
    return [f for f in feats if f]


def _attribute_items(record: Any) -> List[str]:
    if not isinstance(record, dict) or not record.get("attributes"):
        return []
    items = []
    for attr in decode_attributes(record.get("attributes")):
        if not attr.name:
            continue
        label = translate_attribute_name(attr.name)
        text = translate_value_text(attr.value, attr.name)
        items.append(f"<li><strong>{csv_html_escape(label)}:</strong> {csv_html_escape(text)}</li>")
    return items


def _feature_items(record: Any) -> List[str]:
    return [f"<li>{csv_html_escape(translate_feature(f))}</li>" for f in feature_strings(record)]


def build_body_html(record: Any) -> str:
    """Technical data and equipment lists, separated by <hr> when both exist."""
    parts = []
    attr_items = _attribute_items(record)
    if attr_items:
        parts.append(f"<p><strong>{TECHNICAL_DATA_LABEL}:</strong></p><ul>{''.join(attr_items)}</ul>")
    feat_items = _feature_items(record)
    if feat_items:
        parts.append(f"<p><strong>{EQUIPMENT_LABEL}:</strong></p><ul>{''.join(feat_items)}</ul>")
    return "<hr>".join(parts)


def build_features_html(record: Any) -> str:
    feat_items = _feature_items(record)
    if not feat_items:
        return ""
    return f"<ul>{''.join(feat_items)}</ul>"
