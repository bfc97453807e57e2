"""Tests for the synthetic sample dataset."""

from __future__ import annotations

import pytest

from flowscope.core.records import Action
from flowscope.io.sample import (
    FLOW_SECONDS,
    VPC_ID,
    SampleGenerator,
    generate_sample_records,
    sample_info,
)

NOW = 1_704_153_600


class TestSample:
    """Tests for generate_sample_records."""

    def test_deterministic(self) -> None:
        assert generate_sample_records(NOW, seed=7) == generate_sample_records(NOW, seed=7)
        assert generate_sample_records(NOW, seed=7) != generate_sample_records(NOW, seed=8)

    def test_within_window(self) -> None:
        records = generate_sample_records(NOW, hours=2)
        assert records
        assert all(NOW - 2 * 3600 <= r.start and r.end <= NOW for r in records)
        assert all(r.end - r.start == FLOW_SECONDS for r in records)
        assert all(r.vpc_id == VPC_ID for r in records)

    def test_traffic_mix(self) -> None:
        records = generate_sample_records(NOW)
        info = sample_info(records)
        assert info.total_records == len(records)
        assert info.rejected > 0
        assert info.accepted > info.rejected
        assert {6, 17, 1} <= {r.protocol for r in records}

    def test_icmp_has_no_ports(self) -> None:
        icmp = [r for r in generate_sample_records(NOW) if r.protocol == 1]
        assert icmp
        assert all(r.srcport == 0 and r.dstport == 0 for r in icmp)

    def test_rejects_are_tcp(self) -> None:
        rejected = [r for r in generate_sample_records(NOW) if r.action is Action.REJECT]
        assert all(r.protocol == 6 for r in rejected)

    def test_invalid_hours(self) -> None:
        with pytest.raises(ValueError):
            SampleGenerator().generate(NOW, hours=0)
