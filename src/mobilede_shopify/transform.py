from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .coerce import IMPERIAL, METRIC, coerce_to_list, extract_digits, extract_paired_unit, lookup_field, to_text
from .describe import build_features_html
from .io import read_dataset, write_rows
from .mapping import MappingEntry, get_metafields_mapping, load_mapping
from .metafields import build_final_row, build_metafields_row
from .normalize import build_handle, image_url, normalize_item
from .pricing import variant_price


log = logging.getLogger(__name__)

SHAPE_FINAL = "final"
SHAPE_FULL = "full"
SHAPE_NORMALIZED = "normalized"
SHAPE_IMAGES = "images"
SHAPE_TEMPLATE = "template"
SHAPES = (SHAPE_FINAL, SHAPE_FULL, SHAPE_NORMALIZED, SHAPE_IMAGES, SHAPE_TEMPLATE)

DESCRIPTION_TAG = "Metafield: description_tag [string]"
DIGIT_COLUMNS = (
    "Metafield: custom.cilindree [single_line_text_field]",
    "Metafield: custom.kilometraj [single_line_text_field]",
)
POWER_COLUMNS = {
    "Metafield: custom.putere_kw [single_line_text_field]": METRIC,
    "Metafield: custom.putere_cp [single_line_text_field]": IMPERIAL,
}


def normalize_dataset(items: Iterable[Any]) -> List[dict]:
    return [normalize_item(item) for item in items]


def map_dataset_to_metafields(
    items: Iterable[Any],
    mapping_list: Optional[Sequence[MappingEntry]] = None,
    final: bool = True,
) -> List[dict]:
    """Metafield rows for every listing; `final` applies the store-import renames."""
    if mapping_list is None:
        mapping_list = get_metafields_mapping()
    build = build_final_row if final else build_metafields_row
    return [build(item, mapping_list) for item in items]


def item_images(item: Any) -> List[str]:
    if not isinstance(item, dict):
        return []
    urls = [image_url(img) for img in coerce_to_list(item.get("images"))]
    urls = [u for u in urls if u]
    if urls:
        return urls
    # flat exports carry images/0, images/1, ...
    i = 0
    while f"images/{i}" in item:
        val = to_text(item[f"images/{i}"])
        if val:
            urls.append(val)
        i += 1
    return urls


def explode_images(items: Iterable[Any]) -> List[dict]:
    """One row per image: Variant SKU, Handle, Image Src."""
    rows = []
    for item in items:
        if not isinstance(item, dict):
            continue
        sku = to_text(item.get("id"))
        handle = build_handle(item.get("title"), item.get("id"))
        for url in item_images(item):
            rows.append({"Variant SKU": sku, "Handle": handle, "Image Src": url})
    return rows


def _primary_image(item: dict) -> str:
    images = item_images(item)
    if images:
        return images[0]
    return to_text(item.get("previewImage"))


def map_item_to_template(item: Any, mapping: Sequence[Tuple[str, str]]) -> dict:
    """Fill the columns of the primary mapping table for one listing.

    Core product columns are generated; every other column is copied from
    its mapped source field, or left empty.
    """
    if not isinstance(item, dict):
        item = {}
    title = to_text(item.get("title")).strip()
    tags = ", ".join(to_text(v).strip() for v in (item.get("brand"), item.get("model")) if to_text(v).strip())
    features_html = build_features_html(item)
    description = to_text(item.get("description") or item.get("description_tag") or "")
    if description and features_html:
        body_html = f"{description}\n{features_html}"
    else:
        body_html = description or features_html

    generated = {
        "handle": build_handle(item.get("title"), item.get("id")),
        "title": title,
        "tags": tags,
        "body html": body_html,
        "image src": _primary_image(item),
        "vendor": to_text(item.get("brand") or item.get("vendor") or ""),
        "type": to_text(item.get("category") or item.get("segment") or ""),
        "variant sku": to_text(item.get("id")),
        "variant price": variant_price(item),
    }

    row = {}
    for column, source in mapping:
        key = column.lower()
        if key in generated:
            row[column] = generated[key]
        elif column == DESCRIPTION_TAG:
            row[column] = features_html
        elif column in DIGIT_COLUMNS:
            row[column] = extract_digits(lookup_field(item, source))
        elif column in POWER_COLUMNS:
            row[column] = extract_paired_unit(lookup_field(item, source), POWER_COLUMNS[column])
        else:
            row[column] = to_text(lookup_field(item, source))
    return row


def map_dataset_to_template(items: Iterable[Any], mapping: Sequence[Tuple[str, str]]) -> List[dict]:
    return [map_item_to_template(item, mapping) for item in items]


def transform_items(
    items: Iterable[Any],
    shape: str = SHAPE_FINAL,
    mapping_list: Optional[Sequence[MappingEntry]] = None,
    template_mapping: Optional[Sequence[Tuple[str, str]]] = None,
) -> List[dict]:
    items = list(items)
    log.info(f"Transforming {len(items)} listings to '{shape}' rows")
    if shape == SHAPE_FINAL:
        return map_dataset_to_metafields(items, mapping_list, final=True)
    if shape == SHAPE_FULL:
        return map_dataset_to_metafields(items, mapping_list, final=False)
    if shape == SHAPE_NORMALIZED:
        return normalize_dataset(items)
    if shape == SHAPE_IMAGES:
        return explode_images(items)
    if shape == SHAPE_TEMPLATE:
        if template_mapping is None:
            template_mapping = load_mapping()
        return map_dataset_to_template(items, template_mapping)
    raise ValueError(f"Unknown output shape '{shape}', expected one of {', '.join(SHAPES)}")


def transform(input_path: Path, shape: str = SHAPE_FINAL, **kwargs) -> List[dict]:
    return transform_items(read_dataset(input_path), shape=shape, **kwargs)


def write_output(output_path: Path, rows: List[dict]) -> None:
    write_rows(output_path, rows, sheet_title="Products")
