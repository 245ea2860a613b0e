"""Shopify product rows with custom metafields, built from one scraped listing.

`build_metafields_row` produces every column the pipeline knows about;
`map_to_new_metafields` then renames and filters that row down to the
columns the store import expects.
"""
from __future__ import annotations
from typing import Any, Dict, Iterable, List

from .attributes import expand_attributes_to_columns
from .coerce import (
    IMPERIAL,
    METRIC,
    coerce_to_list,
    extract_paired_unit,
    lookup_field,
    to_text,
)
from .describe import build_body_html, build_features_html, feature_strings
from .mapping import MappingEntry
from .normalize import attribute_value_text, build_handle, decode_attributes, image_url, parse_dealer
from .pricing import price_without_vat, variant_price
from .translations import drive_train_code


MF_BRAND = "Metafield: custom.marca [single_line_text_field]"
MF_MODEL = "Metafield: custom.model [single_line_text_field]"
MF_POWER_KW = "Metafield: custom.putere_kw [single_line_text_field]"
MF_POWER_CP = "Metafield: custom.putere_cp [single_line_text_field]"
MF_DRIVE_TRAIN = "Metafield: custom.transmisie [list.single_line_text_field]"
MF_TAX = "Metafield: custom.tva [single_line_text_field]"
TEMPLATE_SUFFIX = "Template Suffix"

TAX_CLASSIFICATION = "Deductibile"
TEMPLATE_SUFFIX_VALUE = "produs_servicii"

POWER_SOURCE = "attributes/Power"
POWER_ATTRIBUTE = "Power"
DIRECT_DESTS = ("Image Alt Text", "Vendor", "Variant Price")
EXCLUDED_COLUMNS = ("Variant ID", "ITP")
MAX_IMAGE_KEYS = 50
MAX_FEATURE_KEYS = 100

# Column renames for the store import; anything not listed here or in
# ALWAYS_KEEP_FIELDS is dropped.
RENAMED_FIELDS = {
    "dealerDetails": "Vendor",
    "Număr vehicul": "Variant Barcode",
    "Greutate": "Variant Weight",
    "Vendor": "Metafield: custom.nr_dos_ [single_line_text_field]",
    "Prima înmatriculare": "Metafield: custom.data_livrarii [single_line_text_field]",
    "Capacitate cilindrică": "Metafield: custom.cilindree [single_line_text_field]",
    "Emisii CO₂ (comb.)": "Metafield: custom.emisii_co2 [single_line_text_field]",
    "Transmisie": "Metafield: custom.cutie_viteze [single_line_text_field]",
    "Clasă de emisii": "Metafield: custom.clasa_de_emisii_noxe [single_line_text_field]",
    "Car Url": "Metafield: custom.nr_imatr_ [single_line_text_field]",
    "Culoare": "Metafield: custom.culoare [single_line_text_field]",
    "Număr uși": "Metafield: custom.nr_de_usi [single_line_text_field]",
    "Construction Year": "Metafield: custom.anul_modelului [single_line_text_field]",
    "Putere": MF_POWER_CP,
    "Kilometraj": "Metafield: custom.kilometraj [single_line_text_field]",
    "Nivel echipare": "Metafield: custom.nivel_de_echipare [single_line_text_field]",
    "Features": "Metafield: custom.dotari [multi_line_text_field]",
    "Categorie": "Metafield: custom.bodu_type [single_line_text_field]",
    "Vehicle tax": MF_TAX,
    "Combustibil": "Metafield: custom.fuel [single_line_text_field]",
    "Battery capacity (in kWh)": "Metafield: custom.capacitate_baterie [single_line_text_field]",
    "Electric range (EAER)": "Metafield: custom.range_mod_electric [single_line_text_field]",
    "Consum de energie (comb.)": "Metafield: custom.consum_combinat [single_line_text_field]",
    "price/withoutVAT/amount": "Metafield: custom.pret_furnizor [single_line_text_field]",
}

ALWAYS_KEEP_FIELDS = frozenset({
    "Title",
    "Body HTML",
    "Tags",
    "Image Src",
    "Image Alt Text",
    "Variant SKU",
    "Variant Price",
    MF_MODEL,
    MF_BRAND,
    MF_POWER_KW,
    MF_POWER_CP,
    MF_DRIVE_TRAIN,
    MF_TAX,
    "Handle",
    TEMPLATE_SUFFIX,
})


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def _apply_mapping(row: dict, tags: dict, item: dict, mapping_list: Iterable[MappingEntry]) -> None:
    for entry in mapping_list:
        value = lookup_field(item, entry.source)
        if _is_blank(value):
            continue
        for dest in entry.dests:
            dest = (dest or "").strip()
            if not dest:
                continue
            if dest == "Tags":
                tags.setdefault(to_text(value), None)
            elif dest in DIRECT_DESTS:
                row[dest] = to_text(value)
            elif dest.startswith("Metafield") and entry.source == POWER_SOURCE:
                if "putere_cp" in dest:
                    row[dest] = extract_paired_unit(value, IMPERIAL)
                elif "putere_kw" in dest:
                    row[dest] = extract_paired_unit(value, METRIC)
                else:
                    row[dest] = to_text(value)
            else:
                row[dest] = attribute_value_text(value)


def first_image(item: dict) -> str:
    for i in range(MAX_IMAGE_KEYS):
        val = item.get(f"images/{i}")
        if val:
            return to_text(val)
    images = coerce_to_list(item.get("images"))
    if images:
        return image_url(images[0])
    return ""


def power_value(item: dict) -> str:
    for attr in decode_attributes(item.get("attributes")):
        if attr.name == POWER_ATTRIBUTE:
            return attribute_value_text(attr.value)
    return ""


def all_feature_strings(item: dict) -> List[str]:
    feats = feature_strings(item)
    for i in range(MAX_FEATURE_KEYS):
        val = item.get(f"features/{i}")
        if val:
            feats.append(to_text(val))
    return feats


def detect_drive_train(item: Any) -> str:
    """Drive-train code from the first feature naming a drive configuration."""
    if not isinstance(item, dict):
        return ""
    for feat in all_feature_strings(item):
        code = drive_train_code(feat)
        if code:
            return code
    return ""


def build_metafields_row(item: Any, mapping_list: Iterable[MappingEntry] = ()) -> Dict[str, str]:
    """Build the full Shopify row for one listing.

    Never raises for malformed input; unparseable parts come out empty.
    """
    if not isinstance(item, dict):
        item = {}
    row: Dict[str, str] = {}
    tags: Dict[str, None] = {}

    _apply_mapping(row, tags, item, mapping_list)

    if item.get("brand"):
        row[MF_BRAND] = to_text(item["brand"])
        tags.setdefault(to_text(item["brand"]), None)
    if item.get("model"):
        row[MF_MODEL] = to_text(item["model"])
        tags.setdefault(to_text(item["model"]), None)

    row["Title"] = to_text(item.get("title") or "")
    row["Handle"] = build_handle(item.get("title"), item.get("id"))

    id_val = to_text(item.get("id"))
    row["Variant SKU"] = id_val
    row["Variant ID"] = id_val

    price = variant_price(item)
    if price:
        row["Variant Price"] = price
    elif not row.get("Variant Price"):
        row["Variant Price"] = ""

    if not row.get("Vendor") and item.get("sellerId") is not None:
        row["Vendor"] = to_text(item["sellerId"])

    row["Image Src"] = first_image(item)
    if not row.get("Image Alt Text"):
        row["Image Alt Text"] = row["Title"]

    row["Tags"] = ", ".join(t for t in tags if t)
    row["Body HTML"] = build_body_html(item)
    row["Features"] = build_features_html(item)

    for key, value in expand_attributes_to_columns(item).items():
        if key not in row:
            row[key] = value

    dealer = parse_dealer(item.get("dealerDetails"))
    row["dealerDetails"] = to_text(dealer.get("name") or "")
    row["Car Url"] = to_text(item.get("url") or "")

    for col in EXCLUDED_COLUMNS:
        row.pop(col, None)

    row["price/withoutVAT/amount"] = price_without_vat(item)

    power = power_value(item)
    row[MF_POWER_KW] = extract_paired_unit(power, METRIC)
    row[MF_POWER_CP] = extract_paired_unit(power, IMPERIAL)

    row[MF_DRIVE_TRAIN] = detect_drive_train(item)

    row[MF_TAX] = TAX_CLASSIFICATION
    row[TEMPLATE_SUFFIX] = TEMPLATE_SUFFIX_VALUE
    return row


def map_to_new_metafields(row: Dict[str, str]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for key, value in row.items():
        if key in ALWAYS_KEEP_FIELDS:
            out[key] = value
        elif key in RENAMED_FIELDS:
            new_key = RENAMED_FIELDS[key]
            # a kept column present in the row beats a rename onto it
            if new_key in ALWAYS_KEEP_FIELDS and new_key in row:
                continue
            out[new_key] = value
    return out


def build_final_row(item: Any, mapping_list: Iterable[MappingEntry] = ()) -> Dict[str, str]:
    return map_to_new_metafields(build_metafields_row(item, mapping_list))
