"""Loading flow records from files.

Supports CSV, JSON arrays, JSON Lines, and the space separated text format
written by VPC flow logs. Rows that cannot become a record (no data for
the window, missing or malformed fields) are skipped and counted.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from ..core.records import FlowRecord

logger = logging.getLogger(__name__)

# Field order of the default (version 2) flow log format
DEFAULT_VPC_FIELDS: tuple[str, ...] = (
    "version",
    "account-id",
    "interface-id",
    "srcaddr",
    "dstaddr",
    "srcport",
    "dstport",
    "protocol",
    "packets",
    "bytes",
    "start",
    "end",
    "action",
    "log-status",
)

# log-status values for windows that carry no flow
_EMPTY_STATUSES = {"NODATA", "SKIPDATA"}


class RecordLoader:
    """Load flow records from CSV, JSON or flow log text files.

    Example:
        >>> loader = RecordLoader()
        >>> records = loader.load_auto("flows.log")
        >>> loader.skipped
        3
    """

    def __init__(self, vpc_fields: Sequence[str] | None = None) -> None:
        """Initialize the loader.

        Args:
            vpc_fields: Field order for flow log text without a header line.
                Defaults to the version 2 format.
        """
        self.vpc_fields = tuple(vpc_fields or DEFAULT_VPC_FIELDS)
        self.skipped = 0

    def _build(self, rows: Iterable[Mapping[str, Any]], path: Path) -> list[FlowRecord]:
        records: list[FlowRecord] = []
        self.skipped = 0
        for row in rows:
            if not isinstance(row, Mapping):
                self.skipped += 1
                logger.debug("Skipping non-object row %r", row)
                continue
            status = str(row.get("log-status") or row.get("log_status") or "").upper()
            if status in _EMPTY_STATUSES:
                self.skipped += 1
                continue
            try:
                records.append(FlowRecord.from_dict(row))
            except (KeyError, ValueError, TypeError) as e:
                self.skipped += 1
                logger.debug("Skipping row %r: %s", row, e)

        if self.skipped:
            logger.warning("Skipped %d rows without usable flow data in %s", self.skipped, path)
        logger.info("Loaded %d records from %s", len(records), path)
        return records

    def load_csv(self, path: str | Path) -> list[FlowRecord]:
        """Load records from a CSV file with a header row.

        Raises:
            FileNotFoundError: If file doesn't exist.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Record file not found: {path}")

        with path.open("r", encoding="utf-8", newline="") as f:
            return self._build(csv.DictReader(f), path)

    def load_json(self, path: str | Path) -> list[FlowRecord]:
        """Load records from a JSON array or JSON Lines file.

        Raises:
            FileNotFoundError: If file doesn't exist.
            json.JSONDecodeError: If the content is not valid JSON.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Record file not found: {path}")

        with path.open("r", encoding="utf-8") as f:
            content = f.read().strip()

        if content.startswith("["):
            rows = json.loads(content)
        else:
            rows = [json.loads(line) for line in content.split("\n") if line.strip()]
        return self._build(rows, path)

    def load_text(self, path: str | Path) -> list[FlowRecord]:
        """Load records from space separated flow log text.

        A first line starting with ``version`` is taken as the header and
        gives the field order; otherwise :attr:`vpc_fields` is used.

        Raises:
            FileNotFoundError: If file doesn't exist.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Record file not found: {path}")

        with path.open("r", encoding="utf-8") as f:
            lines = [line.split() for line in f if line.strip()]

        fields: Sequence[str] = self.vpc_fields
        if lines and lines[0] and lines[0][0] == "version":
            fields = lines.pop(0)
        return self._build((dict(zip(fields, values)) for values in lines), path)

    def load_auto(self, path: str | Path) -> list[FlowRecord]:
        """Auto-detect format and load records.

        ``.csv`` is CSV, ``.json``/``.jsonl`` is JSON, ``.log``/``.txt`` is
        flow log text. Other suffixes are sniffed from the first character.
        """
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix == ".csv":
            return self.load_csv(path)
        elif suffix in (".json", ".jsonl"):
            return self.load_json(path)
        elif suffix in (".log", ".txt"):
            return self.load_text(path)
        else:
            with path.open("r", encoding="utf-8") as f:
                first_line = f.readline()
            if first_line[:1] in ("{", "["):
                return self.load_json(path)
            elif "," in first_line:
                return self.load_csv(path)
            else:
                return self.load_text(path)


def load_records(path: str | Path) -> list[FlowRecord]:
    """Load records from a file, detecting its format."""
    return RecordLoader().load_auto(path)
