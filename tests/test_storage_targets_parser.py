# tests/test_storage_targets_parser.py

import pandas as pd
import pytest

from lotbook.errors import ValidationError
from lotbook.models import StorageTarget
from lotbook.parsers.storage_targets import StorageTargetsParser
from lotbook.services.lookups import import_storage_targets, import_storage_targets_file


def _workbook(tmp_path, rows, name="targets.xlsx"):
    path = tmp_path / name
    with pd.ExcelWriter(path, engine="openpyxl") as w:
        pd.DataFrame(rows).to_excel(w, sheet_name="MASTER", index=False)
    return str(path)


def test_parser_maps_columns_and_normalises(tmp_path):
    path = _workbook(tmp_path, [
        {"Code No": "k 1", "Type": "Kunchinittu", "Variety": "Sona Masoori", "Active": "yes"},
        {"Code No": 12, "Type": "OT", "Variety": "BPT 5204", "Active": "no"},
        {"Code No": "X9", "Type": "Silo", "Variety": "BPT 5204", "Active": "yes"},
        {"Code No": "K3", "Type": "KN", "Variety": None, "Active": None},
    ])

    p = StorageTargetsParser()
    meta = p.sniff(path)
    assert meta["errors"] == []
    assert meta["sheet_used"] == "MASTER"
    assert meta["mapped_sample"]["code"] == "Code No"

    rows = p.parse(path)
    assert [(r["kind"], r["code"]) for r in rows] == [("KUNCHINITTU", "K1"), ("OUTTURN", "12")]
    assert rows[0]["active"] is True
    assert rows[1]["active"] is False
    # unknown kind, missing variety
    assert len(p.rejected) == 2


def test_sniff_reports_missing_columns(tmp_path):
    path = _workbook(tmp_path, [{"Code": "K1", "Remarks": "x"}])
    meta = StorageTargetsParser().sniff(path)
    assert any("kind" in e for e in meta["errors"])
    assert any("variety" in e for e in meta["errors"])


def test_sniff_invalid_file(tmp_path):
    path = tmp_path / "broken.xlsx"
    path.write_text("not a workbook")
    meta = StorageTargetsParser().sniff(str(path))
    assert meta["errors"]


def test_import_upserts(app, tmp_path):
    path = _workbook(tmp_path, [
        {"Code": "K1", "Kind": "Kunchinittu", "Variety": "Sona Masoori"},
        {"Code": "OT1", "Kind": "Outturn", "Variety": "BPT 5204"},
    ])
    result = import_storage_targets(StorageTargetsParser().parse(path))
    assert result == {"created": 2, "updated": 0, "skipped": 0}

    result = import_storage_targets([
        {"kind": "KUNCHINITTU", "code": "K1", "variety": "RNR 15048", "active": False},
        {"kind": "GODOWN", "code": "G1", "variety": "RNR 15048"},
    ])
    assert result == {"created": 0, "updated": 1, "skipped": 1}

    k1 = StorageTarget.query.filter_by(kind="KUNCHINITTU", code="K1").one()
    assert k1.variety == "RNR 15048"
    assert k1.active is False


def test_import_from_workbook(app, tmp_path):
    path = _workbook(tmp_path, [
        {"Code": "K5", "Kind": "KN", "Variety": "RNR 15048"},
        {"Code": "K6", "Kind": "Godown", "Variety": "RNR 15048"},
    ])
    result = import_storage_targets_file(path)
    assert result["created"] == 1
    assert result["skipped"] == 1
    assert [r["code"] for r in result["rejected"]] == ["K6"]
    assert StorageTarget.query.filter_by(code="K5").one().kind == "KUNCHINITTU"


def test_import_from_workbook_without_required_columns(app, tmp_path):
    path = _workbook(tmp_path, [{"Code": "K1", "Remarks": "x"}])
    with pytest.raises(ValidationError) as exc:
        import_storage_targets_file(path)
    assert any("kind" in e for e in exc.value.errors)
    assert StorageTarget.query.count() == 0
