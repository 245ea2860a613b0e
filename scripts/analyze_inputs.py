#!/usr/bin/env python3
import sys
from pathlib import Path
from collections import Counter

sys.path.append(str(Path(__file__).resolve().parents[1] / 'src'))
from mobilede_shopify.io import read_dataset  # type: ignore
from mobilede_shopify.normalize import decode_attributes  # type: ignore
from mobilede_shopify.pricing import source_amount  # type: ignore
from mobilede_shopify.translations import ATTR_TRANSLATIONS  # type: ignore


def main():
    root = Path(sys.argv[1] if len(sys.argv) > 1 else 'data/input')
    files = [p for p in sorted(root.iterdir()) if p.suffix.lower() in ('.json', '.jsonl', '.csv', '.xlsx')]
    items = []
    for p in files:
        items.extend(read_dataset(p))

    c_attr = Counter()
    for it in items:
        c_attr.update(a.name for a in decode_attributes(it.get('attributes')) if a.name)
    c_has_price = sum(1 for it in items if source_amount(it))
    c_has_images = sum(1 for it in items if it.get('images') or it.get('images/0'))
    c_has_features = sum(1 for it in items if it.get('features') or it.get('features/0'))

    print('Files considered:')
    for p in files:
        print(f'- {p.name}')
    print(f"\nTotal listings: {len(items)}")
    print(f"Listings with a price: {c_has_price}")
    print(f"Listings with images: {c_has_images}")
    print(f"Listings with features: {c_has_features}")

    print('\nAttribute names (* = no translation):')
    for k, v in c_attr.most_common(40):
        mark = '' if k in ATTR_TRANSLATIONS else ' *'
        print(f'- {k}: {v}{mark}')

if __name__ == '__main__':
    main()
