from __future__ import annotations

import json

import pytest

from mobilede_shopify.transform import (
    DESCRIPTION_TAG,
    explode_images,
    map_dataset_to_metafields,
    map_item_to_template,
    normalize_dataset,
    transform,
    transform_items,
)

CILINDREE = "Metafield: custom.cilindree [single_line_text_field]"
KILOMETRAJ = "Metafield: custom.kilometraj [single_line_text_field]"
PUTERE_KW = "Metafield: custom.putere_kw [single_line_text_field]"
PUTERE_CP = "Metafield: custom.putere_cp [single_line_text_field]"


def test_map_dataset_final_and_full(listing):
    final = map_dataset_to_metafields([listing, {}], [], final=True)
    full = map_dataset_to_metafields([listing], [], final=False)
    assert len(final) == 2
    assert "Stare vehicul" not in final[0]
    assert full[0]["Stare vehicul"] == "Folosit"
    assert final[0]["Variant Price"] == full[0]["Variant Price"] == "22268.07"


def test_normalize_dataset(listing):
    rows = normalize_dataset([listing, None])
    assert rows[0]["source_id"] == "4123"
    assert rows[1]["title"] == ""


def test_explode_images(listing):
    rows = explode_images([listing, {"id": 9, "title": "Golf", "images/0": "a.jpg", "images/1": "b.jpg"}, "junk"])
    assert rows == [
        {"Variant SKU": "4123", "Handle": "bmw-320d-touring-m-sport-4123", "Image Src": "https://img.example/1.jpg"},
        {"Variant SKU": "4123", "Handle": "bmw-320d-touring-m-sport-4123", "Image Src": "https://img.example/2.jpg"},
        {"Variant SKU": "9", "Handle": "golf-9", "Image Src": "a.jpg"},
        {"Variant SKU": "9", "Handle": "golf-9", "Image Src": "b.jpg"},
    ]


def test_map_item_to_template(listing):
    item = dict(
        listing,
        description="Great car",
        category="EstateCar",
        mileage="125,000 km",
        power="140 kW (190 hp)",
        fuel="Diesel",
        **{"attributes/Cubic Capacity": "1,995 ccm"},
    )
    mapping = [
        ("Handle", "id"),
        ("Title", "title"),
        ("Tags", "brand"),
        ("Body HTML", "description"),
        ("Image Src", "images"),
        ("Vendor", "sellerId"),
        ("Type", "category"),
        ("Variant SKU", "id"),
        ("Variant Price", "price"),
        (DESCRIPTION_TAG, "features"),
        (CILINDREE, "attributes/Cubic Capacity"),
        (KILOMETRAJ, "mileage"),
        (PUTERE_KW, "power"),
        (PUTERE_CP, "power"),
        ("Metafield: custom.fuel [single_line_text_field]", "fuel"),
        ("Metafield: custom.other [single_line_text_field]", "nothing"),
    ]
    row = map_item_to_template(item, mapping)
    assert list(row) == [column for column, _ in mapping]
    assert row["Handle"] == "bmw-320d-touring-m-sport-4123"
    assert row["Title"] == "BMW 320d Touring M Sport"
    assert row["Tags"] == "BMW, 320"
    assert row["Body HTML"].startswith("Great car\n<ul>")
    assert row[DESCRIPTION_TAG].startswith("<ul><li>ABS</li><li>Tracțiune față</li>")
    assert row["Image Src"] == "https://img.example/1.jpg"
    assert row["Vendor"] == "BMW"
    assert row["Type"] == "EstateCar"
    assert row["Variant SKU"] == "4123"
    assert row["Variant Price"] == "22268.07"
    assert row[CILINDREE] == "1995"
    assert row[KILOMETRAJ] == "125000"
    assert row[PUTERE_KW] == "140"
    assert row[PUTERE_CP] == "190"
    assert row["Metafield: custom.fuel [single_line_text_field]"] == "Diesel"
    assert row["Metafield: custom.other [single_line_text_field]"] == ""


def test_template_falls_back_to_preview_image():
    row = map_item_to_template({"previewImage": "p.jpg"}, [("Image Src", "")])
    assert row == {"Image Src": "p.jpg"}


def test_transform_items_dispatch(listing):
    assert transform_items([listing], shape="images", mapping_list=[])[0]["Image Src"] == "https://img.example/1.jpg"
    assert "price_amount" in transform_items([listing], shape="normalized")[0]
    assert transform_items([listing], shape="template", template_mapping=[("Title", "title")]) == [
        {"Title": "BMW 320d Touring M Sport"}
    ]
    with pytest.raises(ValueError):
        transform_items([listing], shape="wide")


def test_transform_reads_file(tmp_path, listing):
    path = tmp_path / "dataset.json"
    path.write_text(json.dumps([listing]), encoding="utf-8")
    rows = transform(path, shape="final", mapping_list=[])
    assert rows[0]["Handle"] == "bmw-320d-touring-m-sport-4123"
