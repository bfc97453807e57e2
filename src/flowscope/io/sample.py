"""Deterministic synthetic flow records for demos and tests.

The dataset models a small three-tier deployment: clients hitting web
servers through a load balancer, web to app to database traffic, DNS,
occasional SSH and ICMP, outbound API calls, and rejected probes and port
scans from random external addresses. One batch is generated every five
minutes over the requested window.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Iterable

from ..core.records import Action, FlowRecord

logger = logging.getLogger(__name__)

STEP_SECONDS = 300
FLOW_SECONDS = 60

ACCOUNT_ID = "123456789012"
VPC_ID = "vpc-sample123"

WEB_SERVERS = ("10.0.1.100", "10.0.1.101", "10.0.1.102")
APP_SERVERS = ("10.0.2.50", "10.0.2.51", "10.0.2.52")
DATABASES = ("10.0.3.10", "10.0.3.11")
LOAD_BALANCER = "10.0.0.10"
EXTERNAL = ("8.8.8.8", "1.1.1.1", "52.94.236.248", "54.239.28.85", "203.0.113.5")
CLIENTS = tuple(f"192.168.1.{i + 10}" for i in range(20))
ADMIN = "192.168.1.5"
INTERNAL = WEB_SERVERS + APP_SERVERS + DATABASES + (LOAD_BALANCER,)
SUSPICIOUS_PORTS = (23, 21, 445, 3389, 1433, 5432)


@dataclass
class SampleInfo:
    """Summary of a generated dataset."""

    total_records: int
    unique_sources: int
    unique_destinations: int
    accepted: int
    rejected: int


class SampleGenerator:
    """Generates the synthetic dataset from a seeded random source."""

    def __init__(self, seed: int = 0) -> None:
        self._rng = random.Random(seed)

    def _ephemeral(self) -> int:
        return self._rng.randint(1024, 61023)

    def _between(self, low: int, span: int) -> int:
        return low + self._rng.randrange(span)

    def _random_address(self) -> str:
        return ".".join(str(self._rng.randrange(255)) for _ in range(4))

    def _record(
        self,
        src: str,
        dst: str,
        srcport: int,
        dstport: int,
        protocol: int,
        nbytes: int,
        packets: int,
        action: Action,
        t: int,
    ) -> FlowRecord:
        return FlowRecord(
            srcaddr=src,
            dstaddr=dst,
            srcport=srcport,
            dstport=dstport,
            protocol=protocol,
            bytes=nbytes,
            packets=packets,
            start=t,
            end=t + FLOW_SECONDS,
            action=action,
            vpc_id=VPC_ID,
            instance_id=f"i-{self._rng.getrandbits(32):08x}",
            interface_id=f"eni-{self._rng.getrandbits(32):08x}",
            account_id=ACCOUNT_ID,
        )

    def batch(self, t: int) -> list[FlowRecord]:
        """Records for the five minute step starting at ``t``."""
        rng = self._rng
        out: list[FlowRecord] = []
        accept = Action.ACCEPT

        # Client web traffic
        for client in CLIENTS[:10]:
            for web in WEB_SERVERS:
                out.append(self._record(
                    client, web, self._ephemeral(), 443, 6,
                    self._between(10_000, 500_000), self._between(10, 500), accept, t,
                ))
            if rng.random() > 0.7:
                out.append(self._record(
                    client, WEB_SERVERS[0], self._ephemeral(), 80, 6,
                    self._between(5_000, 300_000), self._between(5, 300), accept, t,
                ))

        for web in WEB_SERVERS:
            out.append(self._record(
                LOAD_BALANCER, web, self._ephemeral(), 8080, 6,
                self._between(50_000, 800_000), self._between(50, 800), accept, t,
            ))

        for web in WEB_SERVERS:
            for app in APP_SERVERS:
                if rng.random() > 0.3:
                    out.append(self._record(
                        web, app, self._ephemeral(), 3000, 6,
                        self._between(10_000, 200_000), self._between(10, 200), accept, t,
                    ))

        for app in APP_SERVERS:
            for db in DATABASES:
                out.append(self._record(
                    app, db, self._ephemeral(), 3306, 6,
                    self._between(5_000, 150_000), self._between(5, 150), accept, t,
                ))
                if rng.random() > 0.5:
                    out.append(self._record(
                        app, db, self._ephemeral(), 6379, 6,
                        self._between(1_000, 50_000), self._between(1, 50), accept, t,
                    ))

        if rng.random() > 0.3:
            out.append(self._record(
                rng.choice(CLIENTS), "8.8.8.8", self._ephemeral(), 53, 17,
                self._between(100, 500), self._between(1, 5), accept, t,
            ))

        if rng.random() > 0.9:
            out.append(self._record(
                ADMIN, rng.choice(INTERNAL), self._ephemeral(), 22, 6,
                self._between(1_000, 10_000), self._between(10, 100), accept, t,
            ))

        if rng.random() > 0.6:
            for app in APP_SERVERS:
                out.append(self._record(
                    app, rng.choice(EXTERNAL), self._ephemeral(), 443, 6,
                    self._between(5_000, 100_000), self._between(5, 100), accept, t,
                ))

        # ICMP carries no ports
        if rng.random() > 0.7:
            src, dst = rng.choice(INTERNAL), rng.choice(INTERNAL)
            if src != dst:
                out.append(self._record(
                    src, dst, 0, 0, 1,
                    self._between(50, 200), self._between(1, 5), accept, t,
                ))

        if rng.random() > 0.8:
            out.append(self._record(
                self._random_address(), rng.choice(INTERNAL), self._ephemeral(),
                rng.choice(SUSPICIOUS_PORTS), 6,
                self._between(10, 100), self._between(1, 3), Action.REJECT, t,
            ))

        if rng.random() > 0.95:
            scanner = self._random_address()
            for port in range(20, 100, 10):
                out.append(self._record(
                    scanner, WEB_SERVERS[0], self._ephemeral(), port, 6,
                    60, 1, Action.REJECT, t,
                ))

        return out

    def generate(self, now: int, hours: int = 24) -> list[FlowRecord]:
        """Generate every batch of the ``hours`` long window ending at ``now``."""
        if hours <= 0:
            raise ValueError("hours must be positive")
        records: list[FlowRecord] = []
        t = now - hours * 3600
        while t + FLOW_SECONDS <= now:
            records.extend(self.batch(t))
            t += STEP_SECONDS
        logger.info("Generated %d sample records over %d hours", len(records), hours)
        return records


def generate_sample_records(
    now: int | None = None, seed: int = 0, hours: int = 24
) -> list[FlowRecord]:
    """Generate a deterministic synthetic dataset.

    Args:
        now: End of the window, epoch seconds. Defaults to the current time.
        seed: Random seed; the same seed and ``now`` give the same records.
        hours: Length of the window.

    Returns:
        Records in chronological batch order.
    """
    if now is None:
        now = int(time.time())
    return SampleGenerator(seed).generate(int(now), hours)


def sample_info(records: Iterable[FlowRecord]) -> SampleInfo:
    records = list(records)
    return SampleInfo(
        total_records=len(records),
        unique_sources=len({r.srcaddr for r in records}),
        unique_destinations=len({r.dstaddr for r in records}),
        accepted=sum(1 for r in records if r.action is Action.ACCEPT),
        rejected=sum(1 for r in records if r.action is Action.REJECT),
    )
