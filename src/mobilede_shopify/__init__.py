"""
mobile.de → Shopify transformer library.

Building blocks for turning scraped mobile.de listings into Shopify
product import rows:
- coerce, normalize: tolerant value parsing and the flat normalized export
- attributes, translations, describe, pricing: Romanian columns, HTML and prices
- metafields: the Shopify row with custom metafields
- mapping, io: mapping workbooks, dataset readers and CSV/XLSX writers
- transform: dataset-level output shapes
- apify_client, config: scraping-service access and environment settings
"""

from . import io, mapping, normalize, describe, metafields, transform  # re-export modules

__all__ = [
    "io",
    "mapping",
    "normalize",
    "describe",
    "metafields",
    "transform",
]
