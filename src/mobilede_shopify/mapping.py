from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from .io import read_sheet_rows


log = logging.getLogger(__name__)

DEFAULT_MAPPING_FILE = "mapping.xlsx"
DEFAULT_METAFIELDS_FILE = "dataset_mobile-de-scraper_mapped_metafields.xlsx"
METAFIELDS_SHEET = "Metafields_Mapping"

# The production sheet spells its source column 'Molbile.de'
SOURCE_HEADER_PREFIXES = ("molbile", "mobile")
DEST_HEADER_MARKERS = ("shopify metafields 1", "shopify metafields 2")


class MappingConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class MappingEntry:
    source: str
    dests: Tuple[str, ...]


def _cell(row: List[str], idx: int) -> str:
    if idx < 0 or idx >= len(row):
        return ""
    return (row[idx] or "").strip()


def load_mapping(path: Path | str = DEFAULT_MAPPING_FILE) -> List[Tuple[str, str]]:
    """Read the (Shopify column, source field) table from the first sheet.

    The header row must name a 'Shopify' and a 'Source' column. Rows missing
    either value are skipped; order follows the sheet.
    """
    path = Path(path)
    if not path.exists():
        raise MappingConfigError(f"Mapping file not found at {path}")
    rows = read_sheet_rows(path)
    if not rows:
        raise MappingConfigError(f"Mapping file {path} is empty")
    header = [(c or "").strip().lower() for c in rows[0]]
    shopify_idx = header.index("shopify") if "shopify" in header else -1
    source_idx = header.index("source") if "source" in header else -1
    if shopify_idx == -1 or source_idx == -1:
        raise MappingConfigError("Mapping file must contain 'Shopify' and 'Source' columns")
    pairs = []
    for row in rows[1:]:
        key = _cell(row, shopify_idx)
        value = _cell(row, source_idx)
        if key and value:
            pairs.append((key, value))
    log.info(f"Loaded {len(pairs)} column mappings from {path}")
    return pairs


def load_metafields_mapping(
    path: Path | str = DEFAULT_METAFIELDS_FILE,
    sheet_name: str = METAFIELDS_SHEET,
) -> List[MappingEntry]:
    """Read source -> metafield destinations from the metafields mapping workbook.

    A missing file, sheet or source column yields an empty list.
    """
    path = Path(path)
    if not path.exists():
        log.warning(f"Metafields mapping file not found: {path}")
        return []
    try:
        rows = read_sheet_rows(path, sheet_name=sheet_name)
    except KeyError:
        log.warning(f"Sheet '{sheet_name}' not found in {path}")
        return []
    if not rows:
        return []

    source_col = -1
    dest_cols = [-1] * len(DEST_HEADER_MARKERS)
    for idx, cell in enumerate(rows[0]):
        val = (cell or "").strip().lower()
        if val.startswith(SOURCE_HEADER_PREFIXES):
            source_col = idx
        for n, marker in enumerate(DEST_HEADER_MARKERS):
            if marker in val:
                dest_cols[n] = idx
    if source_col == -1:
        log.warning(f"No source column in {path}:{sheet_name}")
        return []

    mappings = []
    for row in rows[1:]:
        src = _cell(row, source_col)
        if not src:
            continue
        dests = tuple(d for d in (_cell(row, c) for c in dest_cols) if d)
        if dests:
            mappings.append(MappingEntry(source=src, dests=dests))
    log.info(f"Loaded {len(mappings)} metafield mappings from {path}")
    return mappings


_METAFIELDS_MAPPING: Optional[List[MappingEntry]] = None


def get_metafields_mapping(path: Path | str | None = None) -> List[MappingEntry]:
    """Process-wide metafields mapping, loaded on first use."""
    if _METAFIELDS_MAPPING is None:
        return reload_metafields_mapping(path)
    return _METAFIELDS_MAPPING


def reload_metafields_mapping(path: Path | str | None = None) -> List[MappingEntry]:
    global _METAFIELDS_MAPPING
    if path is None:
        from .config import get_settings

        path = get_settings().metafields_mapping_file
    # replaced wholesale, never mutated in place
    _METAFIELDS_MAPPING = load_metafields_mapping(path)
    return _METAFIELDS_MAPPING
