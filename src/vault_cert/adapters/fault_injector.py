from __future__ import annotations

import logging
import subprocess
import time
from collections.abc import Callable, Sequence
from datetime import timedelta

from vault_cert.domain.errors import FixtureError
from vault_cert.domain.models import FaultWindow
from vault_cert.ports.fault_injector import FaultInjector

logger = logging.getLogger(__name__)

CommandRunner = Callable[..., subprocess.CompletedProcess]


class IptablesFaultInjector(FaultInjector):
    # Drops TCP traffic to/from a port with iptables rules; restore deletes the same rules.
    def __init__(
        self,
        *,
        command_prefix: Sequence[str] = (),
        iptables: str = "iptables",
        runner: CommandRunner = subprocess.run,
        sleep_fn: Callable[[float], None] = time.sleep,
    ) -> None:
        self._command_prefix = tuple(command_prefix)
        self._iptables = iptables
        self._runner = runner
        self._sleep_fn = sleep_fn

    def interrupt(self, port: str, duration: timedelta) -> FaultWindow:
        window = FaultWindow(target_port=port, duration=duration)
        logger.info("interrupting port %s for %.0fs", port, window.seconds)
        self.cut(port)
        try:
            self._sleep_fn(window.seconds)
        finally:
            self.restore(port)
        logger.info("connectivity to port %s restored", port)
        return window

    def cut(self, port: str) -> None:
        # All rules or none: a failed append removes the rules already added.
        added: list[tuple[str, ...]] = []
        try:
            for rule in _rules(port):
                self._iptables_call("-A", rule)
                added.append(rule)
        except FixtureError:
            for rule in reversed(added):
                try:
                    self._iptables_call("-D", rule)
                except FixtureError as exc:
                    logger.warning("failed to roll back iptables rule for port %s: %s", port, exc)
            raise

    def restore(self, port: str) -> None:
        # Delete every rule even if one deletion fails, then report the first failure.
        first_error: FixtureError | None = None
        for rule in _rules(port):
            try:
                self._iptables_call("-D", rule)
            except FixtureError as exc:
                logger.warning("failed to remove iptables rule for port %s: %s", port, exc)
                first_error = first_error or exc
        if first_error is not None:
            raise first_error

    def _iptables_call(self, action: str, rule: tuple[str, ...]) -> None:
        command = [*self._command_prefix, self._iptables, action, *rule]
        try:
            self._runner(command, check=True, capture_output=True, text=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise FixtureError(f"Command failed: {' '.join(command)}: {exc}") from exc


def _rules(port: str) -> list[tuple[str, ...]]:
    return [
        ("INPUT", "-p", "tcp", "--dport", port, "-j", "DROP"),
        ("OUTPUT", "-p", "tcp", "--dport", port, "-j", "DROP"),
    ]
