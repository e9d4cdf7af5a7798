# lotbook/parsers/storage_targets.py

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from openpyxl import load_workbook

from lotbook.parsers.base import BaseParser
from lotbook.parsers.normalization import (
    map_columns_by_synonyms,
    normalize_code,
    normalize_flag,
    normalize_target_kind,
)


class StorageTargetsParser(BaseParser):
    """
    Kunchinittu / outturn master workbook, first sheet:
      Code | Kind | Variety [| Active]
    - sniff(): header only, maps columns by synonyms.
    - parse(): streams rows with openpyxl read_only; rows without a code,
      with an unknown kind or without a variety are reported, not imported.
    """

    SYNONYMS = {
        "code": ["Code", "Code No", "Kunchinittu", "Outturn", "Number", "No"],
        "kind": ["Kind", "Type", "Target Type", "Storage Type"],
        "variety": ["Variety", "Paddy Variety", "Item"],
        "active": ["Active", "Status", "Enabled"],
    }

    REQUIRED = ("code", "kind", "variety")

    def __init__(self):
        self.rejected: List[dict] = []

    def sniff(self, path: str) -> Dict:
        meta: Dict[str, Any] = {"errors": [], "warnings": []}

        try:
            wb = load_workbook(filename=path, read_only=True, data_only=True)
        except Exception as e:
            meta["errors"].append(f"Storage targets: could not open the file (invalid or corrupt): {e}")
            return meta

        try:
            meta["sheets"] = [ws.title for ws in wb.worksheets]
            if not wb.worksheets:
                meta["errors"].append("Storage targets: the workbook has no sheets.")
                return meta

            ws = wb.worksheets[0]
            meta["sheet_used"] = ws.title

            headers, header_row = self._read_headers(ws)
            if header_row == 2:
                meta["warnings"].append("Storage targets: row 1 looks empty; using row 2 as header.")

            mapped = map_columns_by_synonyms(headers, self.SYNONYMS)
            for canon in self.REQUIRED:
                if not mapped.get(canon):
                    meta["errors"].append(f"Storage targets: no '{canon}' column found.")

            meta["mapped_sample"] = mapped
            meta["headers_preview"] = headers[:50]
        except Exception as e:
            meta["errors"].append(f"Storage targets: error reading header: {e}")
        finally:
            try:
                wb.close()
            except Exception:
                pass

        return meta

    def parse(self, path: str) -> List[dict]:
        wb = load_workbook(filename=path, read_only=True, data_only=True)
        try:
            if not wb.worksheets:
                raise ValueError("Storage targets: the workbook has no sheets.")

            ws = wb.worksheets[0]
            headers, header_row = self._read_headers(ws)
            mapped = map_columns_by_synonyms(headers, self.SYNONYMS)

            missing = [c for c in self.REQUIRED if not mapped.get(c)]
            if missing:
                raise ValueError(f"Storage targets: required columns not found ({', '.join(missing)}).")

            idx = self._build_index_map(headers)

            def get_cell(row: Tuple[Any, ...], col_name: Optional[str]) -> Any:
                if not col_name:
                    return None
                i = idx.get(col_name)
                if i is None:
                    return None
                return row[i] if i < len(row) else None

            self.rejected = []
            rows: List[dict] = []

            for n, row in enumerate(ws.iter_rows(min_row=header_row + 1, values_only=True), start=header_row + 1):
                if not any(c not in (None, "") for c in row):
                    continue

                code = normalize_code(get_cell(row, mapped["code"]))
                kind = normalize_target_kind(get_cell(row, mapped["kind"]))
                variety = str(get_cell(row, mapped["variety"]) or "").strip()

                if not code or kind is None or not variety:
                    self.rejected.append({"row": n, "code": code, "kind": get_cell(row, mapped["kind"])})
                    continue

                rows.append({
                    "code": code,
                    "kind": kind.value,
                    "variety": variety,
                    "active": normalize_flag(get_cell(row, mapped.get("active"))),
                    "sheet": ws.title,
                })

            return rows

        finally:
            try:
                wb.close()
            except Exception:
                pass

    # -----------------------
    # Helpers
    # -----------------------

    def _read_headers(self, ws) -> Tuple[List[str], int]:
        first = next(ws.iter_rows(min_row=1, max_row=1, values_only=True), ())
        headers = [("" if c is None else str(c).strip()) for c in first]
        if self._is_mostly_empty(headers):
            second = next(ws.iter_rows(min_row=2, max_row=2, values_only=True), None)
            if second:
                headers2 = [("" if c is None else str(c).strip()) for c in second]
                if not self._is_mostly_empty(headers2):
                    return headers2, 2
        return headers, 1

    def _is_mostly_empty(self, row: List[str]) -> bool:
        if not row:
            return True
        non_empty = sum(1 for c in row if c and str(c).strip())
        return non_empty <= max(1, int(len(row) * 0.05))  # <=5% filled

    def _build_index_map(self, headers: List[str]) -> Dict[str, int]:
        idx: Dict[str, int] = {}
        for i, h in enumerate(headers):
            key = (h or "").strip()
            if key and key not in idx:
                idx[key] = i
        return idx
