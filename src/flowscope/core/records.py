"""Flow record data model."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Mapping


class Action(str, Enum):
    """Security group / NACL decision recorded for a flow."""

    ACCEPT = "ACCEPT"
    REJECT = "REJECT"

    @classmethod
    def parse(cls, value: str | Action) -> Action:
        """Parse an action name case-insensitively."""
        if isinstance(value, Action):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown action: {value!r}") from None


@dataclass(frozen=True)
class FlowRecord:
    """One summarized connection observation.

    Attributes:
        srcaddr: Source IP address.
        dstaddr: Destination IP address.
        srcport: Source port (0 for protocols without ports).
        dstport: Destination port (0 for protocols without ports).
        protocol: IANA protocol number (6 = TCP, 17 = UDP, 1 = ICMP).
        bytes: Bytes transferred during the capture window.
        packets: Packets transferred during the capture window.
        start: Window start, epoch seconds.
        end: Window end, epoch seconds.
        action: ACCEPT or REJECT.
        vpc_id: Optional VPC identifier.
        instance_id: Optional instance identifier.
        interface_id: Optional network interface identifier.
        account_id: Optional owning account identifier.
    """

    srcaddr: str
    dstaddr: str
    srcport: int
    dstport: int
    protocol: int
    bytes: int
    packets: int
    start: int
    end: int
    action: Action
    vpc_id: str | None = None
    instance_id: str | None = None
    interface_id: str | None = None
    account_id: str | None = None

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"end ({self.end}) must not precede start ({self.start})")
        if self.bytes < 0:
            raise ValueError("bytes must be non-negative")
        if self.packets < 0:
            raise ValueError("packets must be non-negative")
        if not isinstance(self.action, Action):
            object.__setattr__(self, "action", Action.parse(self.action))

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["action"] = self.action.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FlowRecord:
        """Build a record from a mapping using VPC flow log column names.

        Hyphenated names (``vpc-id``) are accepted as well as underscored ones.

        Raises:
            KeyError: If a required column is missing.
            ValueError: If a value cannot be converted or breaks an invariant.
        """
        norm = {str(k).replace("-", "_"): v for k, v in data.items()}

        def optional(name: str) -> str | None:
            value = norm.get(name)
            if value in (None, "", "-"):
                return None
            return str(value)

        return cls(
            srcaddr=str(norm["srcaddr"]),
            dstaddr=str(norm["dstaddr"]),
            srcport=int(norm["srcport"]),
            dstport=int(norm["dstport"]),
            protocol=int(norm["protocol"]),
            bytes=int(norm["bytes"]),
            packets=int(norm["packets"]),
            start=int(norm["start"]),
            end=int(norm["end"]),
            action=Action.parse(norm["action"]),
            vpc_id=optional("vpc_id"),
            instance_id=optional("instance_id"),
            interface_id=optional("interface_id"),
            account_id=optional("account_id"),
        )
