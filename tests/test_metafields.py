from __future__ import annotations

import re

import pytest

from mobilede_shopify.mapping import MappingEntry
from mobilede_shopify.metafields import (
    MF_BRAND,
    MF_DRIVE_TRAIN,
    MF_MODEL,
    MF_POWER_CP,
    MF_POWER_KW,
    MF_TAX,
    build_final_row,
    build_metafields_row,
    detect_drive_train,
    map_to_new_metafields,
)

CORE_COLUMNS = ("Title", "Handle", "Variant SKU", "Tags", "Body HTML")


def test_full_row_core_columns(listing):
    row = build_metafields_row(listing, [])
    assert row["Title"] == "BMW 320d Touring M Sport"
    assert row["Handle"] == "bmw-320d-touring-m-sport-4123"
    assert row["Variant SKU"] == "4123"
    assert "Variant ID" not in row
    assert "ITP" not in row
    assert row["Variant Price"] == "22268.07"
    assert row["Vendor"] == "98765"
    assert row["Image Src"] == "https://img.example/1.jpg"
    assert row["Image Alt Text"] == row["Title"]
    assert row["Tags"] == "BMW, 320"
    assert row[MF_BRAND] == "BMW"
    assert row[MF_MODEL] == "320"


def test_full_row_derived_columns(listing):
    row = build_metafields_row(listing, [])
    assert row[MF_POWER_KW] == "140"
    assert row[MF_POWER_CP] == "190"
    assert row[MF_DRIVE_TRAIN] == "2x4 (FWD)"
    assert row[MF_TAX] == "Deductibile"
    assert row["Template Suffix"] == "produs_servicii"
    assert row["dealerDetails"] == "Auto Haus"
    assert row["Car Url"] == listing["url"]
    assert row["price/withoutVAT/amount"] == "16806.72"
    assert row["Stare vehicul"] == "Folosit"
    assert row["Culoare"] == "Black"


def test_body_html_sections(listing):
    body = build_metafields_row(listing, [])["Body HTML"]
    tech, equipment = body.split("<hr>")
    assert tech.startswith("<p><strong>Date tehnice:</strong></p><ul>")
    assert "<li><strong>Putere:</strong> 140 kW (190 hp)</li>" in tech
    assert "<li><strong>Stare vehicul:</strong> Vehicul folosit</li>" in tech
    assert "<li><strong>Culoare:</strong> Black</li>" in tech
    assert equipment.startswith("<p><strong>Dotari:</strong></p><ul>")
    assert "<li>Tracțiune față</li>" in equipment


def test_features_html(listing):
    row = build_metafields_row(listing, [])
    assert row["Features"].startswith("<ul><li>ABS</li>")
    assert build_metafields_row({"id": 1}, [])["Features"] == ""


def test_html_text_is_escaped():
    item = {"id": 1, "attributes": {"Trim": "M <Sport>"}, "features": ["Lights & Sound"]}
    row = build_metafields_row(item, [])
    assert "<li><strong>Trim:</strong> M &lt;Sport&gt;</li>" in row["Body HTML"]
    assert row["Features"] == "<ul><li>Lights &amp; Sound</li></ul>"


def test_mapping_destinations(listing):
    item = dict(listing, price={"amount": "price on request"}, segment="Estate")
    mapping = [
        MappingEntry("dealerDetails/name", ("Vendor",)),
        MappingEntry("brand", ("Tags",)),
        MappingEntry("segment", ("Tags", "Image Alt Text")),
        MappingEntry("price/amount", ("Variant Price",)),
        MappingEntry("missing", ("Metafield: custom.never [single_line_text_field]",)),
        MappingEntry("rank", ("Metafield: custom.rank [single_line_text_field]",)),
    ]
    row = build_metafields_row(item, mapping)
    assert row["Vendor"] == "Auto Haus"
    assert row["Tags"] == "BMW, Estate, 320"
    assert row["Image Alt Text"] == "Estate"
    assert row["Variant Price"] == "price on request"
    assert "Metafield: custom.never [single_line_text_field]" not in row
    assert "Metafield: custom.rank [single_line_text_field]" not in row


def test_power_mapping_is_overridden_by_attributes():
    item = {
        "id": 7,
        "attributes/Power": "100 kW (136 hp)",
        "attributes": {"Power": "150 kW (204 hp)"},
    }
    mapping = [
        MappingEntry("attributes/Power", (MF_POWER_KW, MF_POWER_CP, "Metafield: custom.putere [single_line_text_field]")),
    ]
    row = build_metafields_row(item, mapping)
    assert row[MF_POWER_KW] == "150"
    assert row[MF_POWER_CP] == "204"
    assert row["Metafield: custom.putere [single_line_text_field]"] == "100 kW (136 hp)"


def test_attribute_columns_do_not_overwrite_mapped_columns():
    item = {"id": 1, "title": "X", "attributes": [{"name": "Fuel", "value": "Diesel"}]}
    row = build_metafields_row(item, [MappingEntry("title", ("Combustibil",))])
    assert row["Combustibil"] == "X"


def test_first_image_from_flat_keys():
    item = {"id": 1, "images/0": "", "images/1": "https://img/b.jpg", "images": ["https://img/a.jpg"]}
    assert build_metafields_row(item)["Image Src"] == "https://img/b.jpg"
    assert build_metafields_row({"images": '["https://img/c.jpg"]'})["Image Src"] == "https://img/c.jpg"


@pytest.mark.parametrize(
    "item",
    [
        None,
        5,
        "listing",
        [],
        {},
        {"attributes": 5},
        {"attributes": "{broken"},
        {"images": "not json", "features": {"name": "ABS"}},
        {"price": [1, 2], "dealerDetails": 7},
        {"title": None, "id": None, "brand": "", "features/3": "Rear wheel drive"},
        {"id": 1, "title": "x", "price": {"amount": "1" + "0" * 27}},
        {"price": {"amount": 1e300}},
        {"price": {"amount": float("nan")}},
        {"price": {"amount": float("inf")}},
    ],
)
def test_row_builder_never_raises(item):
    row = build_metafields_row(item, [MappingEntry("a/b/c", ("Tags",))])
    for col in CORE_COLUMNS:
        assert col in row
    assert re.fullmatch(r"[a-z0-9-]*", row["Handle"])


def test_oversized_price_keeps_mapped_variant_price():
    item = {"id": 1, "price": {"amount": 1e300}, "listPrice": "15000"}
    row = build_metafields_row(item, [MappingEntry("listPrice", ("Variant Price",))])
    assert row["Variant Price"] == "15000"
    assert build_metafields_row({"id": 1, "price": {"amount": 1e300}})["Variant Price"] == ""


def test_detect_drive_train():
    assert detect_drive_train({"features": ["Rear wheel drive"]}) == "4x2 (RWD)"
    assert detect_drive_train({"features/0": "ABS", "features/1": "FRONT WHEEL DRIVE"}) == "2x4 (FWD)"
    assert detect_drive_train({"features": "Four-wheel drive; ABS"}) == "4x4 (AWD)"
    assert detect_drive_train({"features": ["Four wheel drive"], "features/0": "Rear wheel drive"}) == "4x4 (AWD)"
    assert detect_drive_train({"features": ["All wheel drive system"]}) == ""
    assert detect_drive_train({"features": []}) == ""
    assert detect_drive_train(None) == ""


def test_final_row_renames_and_filters(listing):
    row = build_final_row(listing, [])
    assert row["Vendor"] == "Auto Haus"
    assert row["Metafield: custom.nr_dos_ [single_line_text_field]"] == "98765"
    assert row["Metafield: custom.culoare [single_line_text_field]"] == "Black"
    assert row["Metafield: custom.cilindree [single_line_text_field]"] == "1,995"
    assert row["Metafield: custom.nr_imatr_ [single_line_text_field]"] == listing["url"]
    assert row["Metafield: custom.pret_furnizor [single_line_text_field]"] == "16806.72"
    assert row["Metafield: custom.dotari [multi_line_text_field]"].startswith("<ul>")
    assert row[MF_POWER_CP] == "190"
    assert row[MF_TAX] == "Deductibile"
    assert "Stare vehicul" not in row
    assert "Putere" not in row
    assert "Features" not in row
    assert "dealerDetails" not in row


def test_map_to_new_metafields_only_known_columns():
    row = {"Title": "T", "Culoare": "Red", "Random": "x", "Vehicle tax": "120 EUR"}
    assert map_to_new_metafields(row) == {
        "Title": "T",
        "Metafield: custom.culoare [single_line_text_field]": "Red",
        MF_TAX: "120 EUR",
    }
