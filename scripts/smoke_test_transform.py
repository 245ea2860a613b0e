#!/usr/bin/env python3
"""Basic smoke test for the transform pipeline.

Runs every output shape on a sample dataset and checks the final rows carry
the core Shopify columns. No network access.
"""
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / 'src'))

from mobilede_shopify.io import read_dataset  # type: ignore
from mobilede_shopify.mapping import load_metafields_mapping  # type: ignore
from mobilede_shopify.transform import SHAPES, SHAPE_TEMPLATE, transform_items, write_output  # type: ignore

CORE_COLUMNS = ('Title', 'Handle', 'Variant SKU', 'Tags', 'Body HTML')


def main() -> int:
    sample = ROOT / 'data' / 'input' / 'dataset_mobile-de-scraper.json'
    if not sample.exists():
        print(f"Sample input not found: {sample}")
        return 0

    items = read_dataset(sample)
    mapping_list = load_metafields_mapping(ROOT / 'dataset_mobile-de-scraper_mapped_metafields.xlsx')
    for shape in SHAPES:
        if shape == SHAPE_TEMPLATE:
            continue
        rows = transform_items(items, shape=shape, mapping_list=mapping_list)
        out_path = ROOT / 'data' / 'output' / f'smoke_test_{shape}.csv'
        write_output(out_path, rows)
        print(f"{shape}: wrote {len(rows)} rows to {out_path}")

    rows = transform_items(items, mapping_list=mapping_list)
    missing = [c for c in CORE_COLUMNS if rows and c not in rows[0]]
    if not rows or missing:
        print(f"Smoke test failed: rows={len(rows)} missing={missing}")
        return 1
    print("Smoke test ok")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
