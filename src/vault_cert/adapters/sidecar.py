from __future__ import annotations

import logging
import subprocess
import threading
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import IO

from vault_cert.domain.errors import FixtureError
from vault_cert.domain.models import Ports
from vault_cert.ports.sidecar import Sidecar

logger = logging.getLogger(__name__)

PopenFactory = Callable[..., subprocess.Popen]


class DaprdSidecar(Sidecar):
    # Runs daprd without an app and forwards its output into the runtime diagnostic logger.
    def __init__(
        self,
        *,
        app_id: str,
        binary: str = "daprd",
        log_level: str = "info",
        resources_flag: str = "--resources-path",
        extra_args: Sequence[str] = (),
        runtime_logger: str = "dapr.runtime",
        stop_timeout: float = 10.0,
        popen: PopenFactory = subprocess.Popen,
    ) -> None:
        self.app_id = app_id
        self._binary = binary
        self._log_level = log_level
        self._resources_flag = resources_flag
        self._extra_args = tuple(extra_args)
        self._runtime_log = logging.getLogger(runtime_logger)
        self._stop_timeout = stop_timeout
        self._popen = popen
        self._process: subprocess.Popen | None = None
        self._pump: threading.Thread | None = None

    def command(self, *, components_path: Path, ports: Ports) -> list[str]:
        return [
            self._binary,
            "--app-id",
            self.app_id,
            self._resources_flag,
            str(components_path),
            "--dapr-grpc-port",
            str(ports.grpc),
            "--dapr-http-port",
            str(ports.http),
            "--log-level",
            self._log_level,
            *self._extra_args,
        ]

    def start(self, *, components_path: Path, ports: Ports) -> None:
        if self.is_running():
            raise FixtureError(f"Sidecar '{self.app_id}' is already running")
        command = self.command(components_path=components_path, ports=ports)
        logger.info("starting sidecar: %s", " ".join(command))
        try:
            # Relative paths inside component metadata (e.g. token files) resolve against the resources dir.
            self._process = self._popen(
                command,
                cwd=str(components_path),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                bufsize=1,
            )
        except OSError as exc:
            raise FixtureError(f"Cannot start {self._binary}: {exc}") from exc
        if self._process.stdout is not None:
            self._pump = threading.Thread(
                target=self._forward_output,
                args=(self._process.stdout,),
                name=f"{self.app_id}-log-pump",
                daemon=True,
            )
            self._pump.start()

    def stop(self) -> None:
        process = self._process
        if process is None:
            return
        logger.info("stopping sidecar %s", self.app_id)
        if process.poll() is None:
            process.terminate()
            try:
                process.wait(timeout=self._stop_timeout)
            except subprocess.TimeoutExpired:
                logger.warning("sidecar %s did not exit in %.0fs; killing", self.app_id, self._stop_timeout)
                process.kill()
                process.wait()
        if self._pump is not None:
            self._pump.join(timeout=self._stop_timeout)
        self._process = None
        self._pump = None

    def is_running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def _forward_output(self, stream: IO[str]) -> None:
        # Every runtime line goes to the diagnostic logger; capture harnesses listen there.
        for line in stream:
            self._runtime_log.info(line.rstrip("\n"))
        stream.close()
