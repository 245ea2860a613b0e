from __future__ import annotations
import csv
import io
import json
import numbers
from pathlib import Path
from typing import Any, Iterable, List, Optional

from .coerce import to_text


XLSX_EXTS = (".xlsx", ".xlsm", ".xltx", ".xltm")
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _val_to_str(v: Any) -> str:
    # Normalize Excel numeric cells: 5225.0 -> '5225'
    if isinstance(v, numbers.Number) and not isinstance(v, bool):
        if float(v).is_integer():
            return str(int(v))
        return str(v)
    return to_text(v)


def _read_sheet_rows_xlsx(input_path: Path, sheet_name: Optional[str]) -> List[List[str]]:
    from openpyxl import load_workbook

    wb = load_workbook(filename=str(input_path), read_only=True, data_only=True)
    try:
        if sheet_name is None:
            ws = wb.worksheets[0]
        elif sheet_name in wb.sheetnames:
            ws = wb[sheet_name]
        else:
            raise KeyError(f"Sheet '{sheet_name}' not found in {input_path.name}")
        return [[_val_to_str(v) for v in row] for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def _read_sheet_rows_xls(input_path: Path, sheet_name: Optional[str]) -> List[List[str]]:
    import xlrd

    book = xlrd.open_workbook(str(input_path))
    if sheet_name is None:
        sheet = book.sheet_by_index(0)
    elif sheet_name in book.sheet_names():
        sheet = book.sheet_by_name(sheet_name)
    else:
        raise KeyError(f"Sheet '{sheet_name}' not found in {input_path.name}")
    data = []
    for r in range(sheet.nrows):
        data.append([_val_to_str(sheet.cell_value(r, c)) for c in range(sheet.ncols)])
    return data


def _read_sheet_rows_csv(input_path: Path) -> List[List[str]]:
    with input_path.open("r", newline="", encoding="utf-8-sig") as f:
        return [list(row) for row in csv.reader(f)]


def read_sheet_rows(input_path: Path, sheet_name: Optional[str] = None) -> List[List[str]]:
    """Read one sheet as rows of strings (header row included).

    Raises FileNotFoundError for a missing file and KeyError for a missing sheet.
    CSV files have a single unnamed sheet; `sheet_name` is ignored for them.
    """
    input_path = Path(input_path)
    if not input_path.exists():
        raise FileNotFoundError(f"File not found: {input_path}")
    ext = input_path.suffix.lower()
    if ext in XLSX_EXTS:
        return _read_sheet_rows_xlsx(input_path, sheet_name)
    if ext == ".xls":
        return _read_sheet_rows_xls(input_path, sheet_name)
    return _read_sheet_rows_csv(input_path)


def _rows_to_records(rows: List[List[str]]) -> List[dict]:
    if not rows:
        return []
    header = [c.strip() for c in rows[0]]
    records = []
    for raw in rows[1:]:
        if not raw or not any(str(c).strip() for c in raw):
            continue
        d = {}
        for i, name in enumerate(header):
            if not name:
                continue
            value = raw[i].strip() if i < len(raw) else ""
            if value:
                d[name] = value
        records.append(d)
    return records


def read_dataset(input_path: Path) -> List[dict]:
    """Load scraped listings from a .json/.jsonl dump or a flat .csv/.xlsx export.

    Flat exports keep the scraper's slash-notated keys (images/0, price/total/amount);
    empty cells are dropped so they read as absent fields.
    """
    input_path = Path(input_path)
    ext = input_path.suffix.lower()
    if ext == ".json":
        data = json.loads(input_path.read_text(encoding="utf-8"))
        if isinstance(data, dict):
            data = data.get("items") or data.get("data") or [data]
        return [d for d in data if isinstance(d, dict)]
    if ext in (".jsonl", ".ndjson"):
        out = []
        for line in input_path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line:
                out.append(json.loads(line))
        return [d for d in out if isinstance(d, dict)]
    return _rows_to_records(read_sheet_rows(input_path))


def collect_headers(rows: Iterable[dict]) -> List[str]:
    headers: dict = {}
    for row in rows:
        for key in row:
            headers.setdefault(key, None)
    return list(headers)


def _csv_cell(val: Any) -> str:
    text = to_text(val).replace('"', '""')
    if any(ch in text for ch in (",", '"', "\n")):
        return f'"{text}"'
    return text


def to_csv(rows: List[dict]) -> str:
    """Comma-separated text over the union of all row keys; missing keys render empty."""
    if not rows:
        return ""
    headers = collect_headers(rows)
    lines = [",".join(_csv_cell(h) for h in headers)]
    for row in rows:
        lines.append(",".join(_csv_cell(row.get(h)) for h in headers))
    return "\n".join(lines)


def _xlsx_cell(val: Any) -> Any:
    from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

    if isinstance(val, numbers.Number) and not isinstance(val, bool):
        return val
    return ILLEGAL_CHARACTERS_RE.sub("", to_text(val))


def to_xlsx_bytes(rows: List[dict], sheet_title: str = "Sheet1") -> bytes:
    from openpyxl import Workbook

    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title
    headers = collect_headers(rows)
    if headers:
        ws.append([_xlsx_cell(h) for h in headers])
    for row in rows:
        ws.append([_xlsx_cell(row.get(h)) for h in headers])
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def write_rows(output_path: Path, rows: List[dict], sheet_title: str = "Sheet1") -> None:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    ext = output_path.suffix.lower()
    if ext in XLSX_EXTS:
        output_path.write_bytes(to_xlsx_bytes(rows, sheet_title=sheet_title))
    elif ext == ".json":
        output_path.write_text(json.dumps(rows, ensure_ascii=False, indent=2), encoding="utf-8")
    else:
        output_path.write_text(to_csv(rows), encoding="utf-8")
