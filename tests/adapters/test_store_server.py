from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from vault_cert.adapters.store_server import ComposeStoreServer
from vault_cert.domain.errors import FixtureError


def test_compose_up_and_down_commands() -> None:
    commands: list[list[str]] = []

    def runner(command, **kwargs):
        commands.append(list(command))
        return subprocess.CompletedProcess(command, 0, "", "")

    server = ComposeStoreServer(project="hashicorp-vault", compose_file=Path("infra/compose.yml"), runner=runner)
    server.start()
    server.stop()
    assert commands == [
        ["docker", "compose", "-p", "hashicorp-vault", "-f", "infra/compose.yml", "up", "-d"],
        ["docker", "compose", "-p", "hashicorp-vault", "-f", "infra/compose.yml", "down", "-v"],
    ]


def test_compose_failure_is_fixture_error() -> None:
    def runner(command, **kwargs):
        raise subprocess.CalledProcessError(1, command, stderr="no such file")

    server = ComposeStoreServer(project="p", compose_file=Path("missing.yml"), runner=runner)
    with pytest.raises(FixtureError) as excinfo:
        server.start()
    assert "no such file" in str(excinfo.value)


def test_missing_docker_is_fixture_error() -> None:
    def runner(command, **kwargs):
        raise FileNotFoundError("docker")

    with pytest.raises(FixtureError):
        ComposeStoreServer(project="p", compose_file=Path("c.yml"), runner=runner).stop()
