"""Tests for port and protocol names."""

from __future__ import annotations

import pytest

from flowscope.utils.port_names import (
    UNKNOWN_SERVICE,
    is_well_known_port,
    port_category,
    port_display,
    port_name,
    protocol_name,
    search_by_service_name,
)


class TestPortNames:
    """Tests for port name lookups."""

    @pytest.mark.parametrize(
        "port,name",
        [(443, "HTTPS"), (22, "SSH"), (53, "DNS"), (80, "HTTP"), (3389, "RDP"), (50000, "SAP")],
    )
    def test_known(self, port: int, name: str) -> None:
        assert port_name(port) == name
        assert is_well_known_port(port)

    def test_unknown(self) -> None:
        assert port_name(54321) == UNKNOWN_SERVICE
        assert not is_well_known_port(54321)

    def test_display(self) -> None:
        assert port_display(443) == "443 - HTTPS"
        assert port_display(54321) == "54321"

    @pytest.mark.parametrize(
        "port,category",
        [(0, "Unknown"), (22, "Well-Known"), (8080, "Registered"), (50000, "Registered"),
         (60000, "Dynamic/Private"), (70000, "Unknown")],
    )
    def test_category(self, port: int, category: str) -> None:
        assert port_category(port) == category

    def test_search(self) -> None:
        results = search_by_service_name("mongodb")
        assert results[0] == (27017, "MONGODB")
        assert all("MONGODB" in name for _, name in results)
        assert [p for p, _ in results] == sorted(p for p, _ in results)


class TestProtocolNames:
    """Tests for IANA protocol names."""

    def test_known(self) -> None:
        assert protocol_name(6) == "TCP"
        assert protocol_name(17) == "UDP"
        assert protocol_name(1) == "ICMP"

    def test_unknown(self) -> None:
        assert protocol_name(253) == "PROTOCOL-253"
