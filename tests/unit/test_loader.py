"""Tests for loading records from files."""

from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest

from flowscope.core.records import Action
from flowscope.io.loader import RecordLoader, load_records

from tests.fixtures.records import make_record

HEADER = (
    "version account-id interface-id srcaddr dstaddr srcport dstport "
    "protocol packets bytes start end action log-status"
)
LINES = [
    "2 123456789012 eni-abc 10.0.0.1 10.0.0.2 49152 443 6 10 5000 1704067200 1704067260 ACCEPT OK",
    "2 123456789012 eni-abc 10.0.0.3 10.0.0.2 49153 22 6 1 60 1704067200 1704067260 REJECT OK",
    "2 123456789012 eni-abc - - - - - - - 1704067200 1704067260 - NODATA",
]


class TestText:
    """Tests for VPC flow log text."""

    def test_without_header(self, tmp_path: Path) -> None:
        path = tmp_path / "flows.log"
        path.write_text("\n".join(LINES) + "\n")
        loader = RecordLoader()
        records = loader.load_text(path)
        assert len(records) == 2
        assert loader.skipped == 1
        first = records[0]
        assert (first.srcaddr, first.dstport, first.bytes) == ("10.0.0.1", 443, 5000)
        assert first.interface_id == "eni-abc"
        assert first.account_id == "123456789012"
        assert records[1].action is Action.REJECT

    def test_with_header(self, tmp_path: Path) -> None:
        path = tmp_path / "flows.txt"
        path.write_text("\n".join([HEADER, *LINES[:2]]))
        records = load_records(path)
        assert [r.srcaddr for r in records] == ["10.0.0.1", "10.0.0.3"]

    def test_custom_field_order(self, tmp_path: Path) -> None:
        path = tmp_path / "flows.log"
        path.write_text("10.0.0.1 10.0.0.2 1 80 6 2 100 0 60 accept\n")
        loader = RecordLoader(
            vpc_fields=["srcaddr", "dstaddr", "srcport", "dstport", "protocol",
                        "packets", "bytes", "start", "end", "action"]
        )
        (record,) = loader.load_text(path)
        assert record.dstport == 80
        assert record.action is Action.ACCEPT

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            RecordLoader().load_text(tmp_path / "nope.log")


class TestStructured:
    """Tests for CSV and JSON input."""

    def test_csv(self, tmp_path: Path) -> None:
        path = tmp_path / "flows.csv"
        rows = [make_record("10.0.0.1", "10.0.0.2", vpc_id="vpc-1").to_dict(),
                make_record("10.0.0.3", "10.0.0.4").to_dict()]
        with path.open("w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(rows[0]))
            writer.writeheader()
            writer.writerows(rows)
        records = RecordLoader().load_csv(path)
        assert records[0].vpc_id == "vpc-1"
        assert records[1].vpc_id is None

    def test_json_array(self, tmp_path: Path) -> None:
        path = tmp_path / "flows.json"
        path.write_text(json.dumps([make_record(nbytes=42).to_dict()]))
        (record,) = load_records(path)
        assert record.bytes == 42

    def test_json_lines_with_bad_row(self, tmp_path: Path) -> None:
        path = tmp_path / "flows.jsonl"
        good = json.dumps(make_record().to_dict())
        bad = json.dumps({"srcaddr": "10.0.0.1"})
        path.write_text(f"{good}\n{bad}\n\n{good}\n")
        loader = RecordLoader()
        assert len(loader.load_json(path)) == 2
        assert loader.skipped == 1

    def test_json_array_with_non_object_elements(self, tmp_path: Path) -> None:
        path = tmp_path / "flows.json"
        path.write_text(json.dumps([make_record().to_dict(), 42, "text", None, [1, 2]]))
        loader = RecordLoader()
        assert len(loader.load_json(path)) == 1
        assert loader.skipped == 4

    def test_sniffs_unknown_suffix(self, tmp_path: Path) -> None:
        path = tmp_path / "flows.data"
        path.write_text(json.dumps([make_record().to_dict()]))
        assert len(RecordLoader().load_auto(path)) == 1

        path.write_text("\n".join(LINES[:1]))
        assert RecordLoader().load_auto(path)[0].dstport == 443
