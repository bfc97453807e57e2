"""Tests for the flow filter."""

from __future__ import annotations

import time

import pytest

from flowscope.core.errors import InvalidFilter
from flowscope.core.filter import DEFAULT_WINDOW_SECONDS, FlowFilter
from flowscope.core.records import Action

from tests.fixtures.records import BASE_TIME, make_record


class TestDefaultWindow:
    """Tests for the default time window."""

    def test_no_bounds_gives_last_day(self) -> None:
        before = time.time()
        flt = FlowFilter()
        after = time.time()
        assert flt.end is not None and flt.start is not None
        assert before <= flt.end <= after
        assert flt.end - flt.start == DEFAULT_WINDOW_SECONDS

    def test_single_bound_stays_open(self) -> None:
        """Test that giving only one bound does not invent the other."""
        assert FlowFilter(start=BASE_TIME).end is None
        assert FlowFilter(end=BASE_TIME).start is None

    def test_window_is_fixed_at_construction(self) -> None:
        flt = FlowFilter()
        assert flt.replace(srcaddr="10.0.0.1").end == flt.end


class TestValidation:
    """Tests for malformed and contradictory filters."""

    def test_start_after_end(self) -> None:
        with pytest.raises(InvalidFilter, match="after end"):
            FlowFilter(start=BASE_TIME + 1, end=BASE_TIME)

    @pytest.mark.parametrize("field", ["srcport", "dstport"])
    @pytest.mark.parametrize("value", [-1, 65536])
    def test_port_range(self, field: str, value: int) -> None:
        with pytest.raises(InvalidFilter):
            FlowFilter(start=0, **{field: value})

    def test_protocol_range(self) -> None:
        with pytest.raises(InvalidFilter):
            FlowFilter(start=0, protocol=256)

    def test_negative_bytes(self) -> None:
        with pytest.raises(InvalidFilter):
            FlowFilter(start=0, min_bytes=-5)

    def test_min_above_max_bytes(self) -> None:
        with pytest.raises(InvalidFilter, match="greater than"):
            FlowFilter(start=0, min_bytes=10, max_bytes=5)

    def test_unknown_action(self) -> None:
        with pytest.raises(InvalidFilter):
            FlowFilter(start=0, action="DROP")  # type: ignore[arg-type]

    def test_invalid_filter_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            FlowFilter(start=0, protocol=-1)

    def test_all_action_means_unrestricted(self) -> None:
        assert FlowFilter(start=0, action="all").action is None  # type: ignore[arg-type]
        assert FlowFilter(start=0, action="reject").action is Action.REJECT  # type: ignore[arg-type]


class TestMatches:
    """Tests for record matching."""

    def test_time_bounds_are_inclusive(self) -> None:
        record = make_record(start=BASE_TIME, end=BASE_TIME + 60)
        assert FlowFilter(start=BASE_TIME, end=BASE_TIME + 60).matches(record)
        assert not FlowFilter(start=BASE_TIME + 1).matches(record)
        assert not FlowFilter(end=BASE_TIME + 59).matches(record)

    def test_zero_is_a_real_value(self) -> None:
        """Test that protocol 0 and port 0 constrain rather than mean 'any'."""
        icmp = make_record(srcport=0, dstport=0, protocol=1)
        tcp = make_record(protocol=6)
        flt = FlowFilter(start=0, dstport=0)
        assert flt.matches(icmp)
        assert not flt.matches(tcp)
        assert not FlowFilter(start=0, protocol=0).matches(icmp)

    def test_exact_fields(self) -> None:
        record = make_record("10.0.0.1", "10.0.0.2", vpc_id="vpc-1", instance_id="i-1")
        assert FlowFilter(start=0, srcaddr="10.0.0.1", vpc_id="vpc-1").matches(record)
        assert not FlowFilter(start=0, dstaddr="10.0.0.1").matches(record)
        assert not FlowFilter(start=0, instance_id="i-2").matches(record)

    def test_byte_bounds_are_inclusive(self) -> None:
        record = make_record(nbytes=100)
        assert FlowFilter(start=0, min_bytes=100, max_bytes=100).matches(record)
        assert not FlowFilter(start=0, min_bytes=101).matches(record)
        assert not FlowFilter(start=0, max_bytes=99).matches(record)

    def test_action(self) -> None:
        rejected = make_record(action="REJECT")
        assert FlowFilter(start=0, action=Action.REJECT).matches(rejected)
        assert not FlowFilter(start=0, action=Action.ACCEPT).matches(rejected)
        assert FlowFilter(start=0).matches(rejected)

    def test_apply_preserves_order(self) -> None:
        records = [make_record(nbytes=n) for n in (5, 500, 50, 5000)]
        kept = FlowFilter(start=0, min_bytes=50).apply(records)
        assert [r.bytes for r in kept] == [500, 50, 5000]
        assert len(records) == 4


class TestSerialization:
    """Tests for dictionary conversion."""

    def test_to_dict_from_dict(self) -> None:
        flt = FlowFilter(start=BASE_TIME, end=BASE_TIME + 10, action=Action.ACCEPT, dstport=443)
        data = flt.to_dict()
        assert data["action"] == "ACCEPT"
        assert FlowFilter.from_dict(data) == flt

    def test_from_dict_ignores_unknown_keys(self) -> None:
        flt = FlowFilter.from_dict({"start": 0, "colour": "blue"})
        assert flt.start == 0
