from __future__ import annotations

import pytest

from vault_cert.adapters.ports import allocate_free_ports, allocate_sidecar_ports


def test_allocated_ports_are_distinct() -> None:
    ports = allocate_free_ports(4)
    assert len(set(ports)) == 4
    assert all(0 < port < 65536 for port in ports)


def test_sidecar_ports_differ() -> None:
    ports = allocate_sidecar_ports()
    assert ports.grpc != ports.http


def test_allocate_requires_positive_count() -> None:
    with pytest.raises(ValueError):
        allocate_free_ports(0)
