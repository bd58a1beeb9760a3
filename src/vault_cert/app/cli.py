from __future__ import annotations

import argparse
import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from certflow.config.loader import ConfigError
from certflow.kernel.records import FlowReport
from certflow.kernel.runner import StepFailure
from certflow.observability.log_capture import LogCaptureHarness
from vault_cert.app.runtime import (
    Fixture,
    build_fixture,
    build_log_capture,
    build_report_sink,
    build_runner,
    run_scenario,
)
from vault_cert.config.loader import load_harness_config
from vault_cert.config.models import HarnessConfig, ReportConfig, ScenarioDecl
from vault_cert.domain.errors import FixtureError
from vault_cert.usecases.catalog import select_scenarios, vault_catalog

logger = logging.getLogger(__name__)

FixtureBuilder = Callable[[HarnessConfig, ScenarioDecl], Fixture]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="HashiCorp Vault secret store certification")
    parser.add_argument("--config", required=True, help="Path to harness YAML config")
    parser.add_argument(
        "--scenario",
        action="append",
        default=[],
        help="Run only this scenario (repeatable); defaults to the config selection or the whole catalog",
    )
    parser.add_argument("--list", action="store_true", help="List scenario names and exit")
    parser.add_argument("--report", help="Write step records as JSON lines to this path")
    parser.add_argument("--log-level", default="INFO", help="Harness log level")
    return parser


def parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    # Parse CLI arguments; caller passes argv for testability.
    return build_parser().parse_args(argv)


def apply_report_override(config: HarnessConfig, args: argparse.Namespace) -> None:
    # CLI overrides take precedence over config.
    if args.report is not None:
        config.report = ReportConfig(kind="jsonl", path=args.report)


def scenarios_for(config: HarnessConfig, args: argparse.Namespace) -> list[ScenarioDecl]:
    catalog = [*vault_catalog(), *config.extra_scenarios]
    return select_scenarios(catalog, list(args.scenario) or list(config.scenarios))


def run_all(
    config: HarnessConfig,
    scenarios: Sequence[ScenarioDecl],
    *,
    fixture_builder: FixtureBuilder | None = None,
    log_capture: LogCaptureHarness | None = None,
) -> dict[str, FlowReport | Exception]:
    # Scenarios run one after another; a failure is recorded and the next scenario still runs.
    build = fixture_builder if fixture_builder is not None else build_fixture
    capture = log_capture if log_capture is not None else build_log_capture(config)
    report_sink = build_report_sink(config)
    runner = build_runner(config, log_capture=capture, report_sink=report_sink)
    results: dict[str, FlowReport | Exception] = {}
    try:
        for scenario in scenarios:
            try:
                fixture = build(config, scenario)
                results[scenario.name] = run_scenario(config, scenario, fixture=fixture, runner=runner)
            except (StepFailure, FixtureError, ConfigError) as exc:
                logger.error("scenario %s failed: %s", scenario.name, exc)
                results[scenario.name] = exc
            except Exception as exc:  # noqa: BLE001 - recorded per scenario so independent scenarios still run.
                logger.exception("scenario %s aborted", scenario.name)
                results[scenario.name] = exc
    finally:
        if report_sink is not None:
            report_sink.close()
    return results


def run(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = load_harness_config(Path(args.config))
    apply_report_override(config, args)
    scenarios = scenarios_for(config, args)

    if args.list:
        for scenario in scenarios:
            print(f"{scenario.name}\t{scenario.description}")
        return 0

    results = run_all(config, scenarios)
    failed = 0
    for name, outcome in results.items():
        if isinstance(outcome, FlowReport):
            print(f"PASS {name}")
            continue
        failed += 1
        if isinstance(outcome, StepFailure):
            print(f"FAIL {name}: step {outcome.index + 1} '{outcome.label}': {outcome.cause}")
        else:
            print(f"FAIL {name}: {outcome}")
    print(f"{len(results) - failed} passed, {failed} failed")
    return 1 if failed else 0
