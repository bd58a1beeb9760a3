from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable
from pathlib import Path

from vault_cert.domain.errors import FixtureError
from vault_cert.ports.store_server import StoreServer

logger = logging.getLogger(__name__)

CommandRunner = Callable[..., subprocess.CompletedProcess]


class ComposeStoreServer(StoreServer):
    # Runs the store server (and its secret seeder) as a docker compose project.
    def __init__(
        self,
        *,
        project: str,
        compose_file: Path,
        docker: str = "docker",
        runner: CommandRunner = subprocess.run,
    ) -> None:
        self.project = project
        self.compose_file = compose_file
        self._docker = docker
        self._runner = runner

    def start(self) -> None:
        logger.info("starting compose project %s from %s", self.project, self.compose_file)
        self._compose("up", "-d")

    def stop(self) -> None:
        logger.info("stopping compose project %s", self.project)
        self._compose("down", "-v")

    def _compose(self, *args: str) -> None:
        command = [self._docker, "compose", "-p", self.project, "-f", str(self.compose_file), *args]
        try:
            self._runner(command, check=True, capture_output=True, text=True)
        except subprocess.CalledProcessError as exc:
            raise FixtureError(f"docker compose {' '.join(args)} failed: {exc.stderr or exc}") from exc
        except OSError as exc:
            raise FixtureError(f"Cannot run {self._docker}: {exc}") from exc
