from __future__ import annotations

import socket
from contextlib import ExitStack

from vault_cert.domain.models import Ports


def allocate_free_ports(count: int, host: str = "127.0.0.1") -> list[int]:
    # All sockets stay bound until every port is picked so the OS never hands out a duplicate.
    if count < 1:
        raise ValueError("count must be >= 1")
    with ExitStack() as stack:
        ports: list[int] = []
        for _ in range(count):
            sock = stack.enter_context(socket.socket(socket.AF_INET, socket.SOCK_STREAM))
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, 0))
            ports.append(sock.getsockname()[1])
        return ports


def allocate_sidecar_ports(host: str = "127.0.0.1") -> Ports:
    grpc, http = allocate_free_ports(2, host)
    return Ports(grpc=grpc, http=http)
