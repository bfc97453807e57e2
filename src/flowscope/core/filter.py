"""Filter model shared by every aggregation backend."""

from __future__ import annotations

import dataclasses
import time
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .errors import InvalidFilter
from .records import Action, FlowRecord

# Window used when a filter names neither a start nor an end bound.
DEFAULT_WINDOW_SECONDS = 24 * 60 * 60

_MAX_PORT = 65535
_MAX_PROTOCOL = 255


@dataclass(frozen=True)
class FlowFilter:
    """Conjunctive predicate over flow record fields.

    Every field is optional and ``None`` means "unrestricted". A value of
    zero is a real constraint: ``protocol=0`` or ``dstport=0`` match records
    carrying zero, which matters for ICMP where ports are absent.

    When neither ``start`` nor ``end`` is given the filter covers the last
    24 hours ending at construction time. The default is resolved once, here,
    so the same filter object means the same window on every backend.

    Attributes:
        start: Earliest record start, epoch seconds (inclusive).
        end: Latest record end, epoch seconds (inclusive).
        srcaddr: Exact source address.
        dstaddr: Exact destination address.
        srcport: Exact source port.
        dstport: Exact destination port.
        protocol: Exact IANA protocol number.
        action: ACCEPT or REJECT; ``None`` (or "ALL") for both.
        vpc_id: Exact VPC identifier.
        instance_id: Exact instance identifier.
        min_bytes: Lower bound on per-record bytes (inclusive).
        max_bytes: Upper bound on per-record bytes (inclusive).
    """

    start: float | None = None
    end: float | None = None
    srcaddr: str | None = None
    dstaddr: str | None = None
    srcport: int | None = None
    dstport: int | None = None
    protocol: int | None = None
    action: Action | None = None
    vpc_id: str | None = None
    instance_id: str | None = None
    min_bytes: int | None = None
    max_bytes: int | None = None

    def __post_init__(self) -> None:
        if self.start is None and self.end is None:
            now = time.time()
            object.__setattr__(self, "end", now)
            object.__setattr__(self, "start", now - DEFAULT_WINDOW_SECONDS)

        if isinstance(self.action, str) and not isinstance(self.action, Action):
            if self.action.strip().upper() == "ALL":
                object.__setattr__(self, "action", None)
            else:
                try:
                    object.__setattr__(self, "action", Action.parse(self.action))
                except ValueError as e:
                    raise InvalidFilter(str(e)) from None

        self._validate()

    def _validate(self) -> None:
        if self.start is not None and self.end is not None and self.start > self.end:
            raise InvalidFilter(f"start ({self.start}) is after end ({self.end})")

        for name in ("srcport", "dstport"):
            value = getattr(self, name)
            if value is not None and not 0 <= value <= _MAX_PORT:
                raise InvalidFilter(f"{name} must be between 0 and {_MAX_PORT}, got {value}")

        if self.protocol is not None and not 0 <= self.protocol <= _MAX_PROTOCOL:
            raise InvalidFilter(
                f"protocol must be between 0 and {_MAX_PROTOCOL}, got {self.protocol}"
            )

        for name in ("min_bytes", "max_bytes"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise InvalidFilter(f"{name} must be non-negative, got {value}")

        if (
            self.min_bytes is not None
            and self.max_bytes is not None
            and self.min_bytes > self.max_bytes
        ):
            raise InvalidFilter(
                f"min_bytes ({self.min_bytes}) is greater than max_bytes ({self.max_bytes})"
            )

    def matches(self, record: FlowRecord) -> bool:
        """Return True if the record satisfies every present predicate."""
        if self.start is not None and record.start < self.start:
            return False
        if self.end is not None and record.end > self.end:
            return False
        if self.srcaddr is not None and record.srcaddr != self.srcaddr:
            return False
        if self.dstaddr is not None and record.dstaddr != self.dstaddr:
            return False
        if self.srcport is not None and record.srcport != self.srcport:
            return False
        if self.dstport is not None and record.dstport != self.dstport:
            return False
        if self.protocol is not None and record.protocol != self.protocol:
            return False
        if self.action is not None and record.action != self.action:
            return False
        if self.vpc_id is not None and record.vpc_id != self.vpc_id:
            return False
        if self.instance_id is not None and record.instance_id != self.instance_id:
            return False
        if self.min_bytes is not None and record.bytes < self.min_bytes:
            return False
        if self.max_bytes is not None and record.bytes > self.max_bytes:
            return False
        return True

    def apply(self, records: Iterable[FlowRecord]) -> list[FlowRecord]:
        """Return the matching records in their original order."""
        return [r for r in records if self.matches(r)]

    def replace(self, **changes: Any) -> FlowFilter:
        """Return a copy with some fields changed."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        data = dataclasses.asdict(self)
        data["action"] = self.action.value if self.action is not None else None
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FlowFilter:
        """Create a filter from a dictionary, ignoring unknown keys."""
        names = {f.name for f in dataclasses.fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})
