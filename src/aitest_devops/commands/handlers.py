"""Command handlers.

One function per CLI command. Each handler runs to completion, reports
through the Reporter and returns whether everything it checked passed.
Failures are reported, never raised; the return value only matters in
strict exit mode.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Callable

from aitest_devops.config.settings import Settings
from aitest_devops.domain.models import Command, ProbeOutcome, ProbeResult, RunStatus
from aitest_devops.probe.client import ProbeClient
from aitest_devops.process.runner import ProcessRunner
from aitest_devops.report import printer
from aitest_devops.report.printer import Reporter

logger = logging.getLogger(__name__)

Handler = Callable[[Settings, Reporter], bool]


def _make_client(settings: Settings) -> ProbeClient:
    return ProbeClient(base_url=settings.api.base_url, timeout=settings.api.timeout)


def _make_runner(settings: Settings) -> ProcessRunner:
    return ProcessRunner(
        kill_command=settings.stop.kill_command,
        kill_args=settings.stop.kill_args,
    )


def _json(value: Any) -> str:
    """Render a parsed JSON value compactly, as received."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


# ---------------------------------------------------------------------------
# health
# ---------------------------------------------------------------------------


def health(settings: Settings, reporter: Reporter) -> bool:
    """Probe the health endpoint once and report the outcome."""
    reporter.step(printer.HEALTH, "Checking API health...")
    return asyncio.run(_health(settings, reporter))


async def _health(settings: Settings, reporter: Reporter) -> bool:
    async with _make_client(settings) as client:
        result = await client.probe_health()

        if result.outcome is ProbeOutcome.OK:
            reporter.success(f"API is healthy: {_json(result.payload)}")
        elif result.outcome is ProbeOutcome.INVALID_JSON:
            reporter.warning("API responded but returned invalid JSON")
        elif result.outcome is ProbeOutcome.BAD_STATUS:
            reporter.failure(f"API health check failed with status: {result.status_text}")
        else:
            reporter.failure(f"Failed to connect to API: {result.error}")
            if client.port is not None:
                reporter.hint(f"Make sure the backend server is running on port {client.port}")
            else:
                reporter.hint(f"Make sure the backend server is running at {client.base_url}")

    return result.passed


# ---------------------------------------------------------------------------
# build
# ---------------------------------------------------------------------------


def build(settings: Settings, reporter: Reporter) -> bool:
    """Install backend dependencies, then build the frontend.

    A failed backend step stops the handler before the frontend step.
    The completion line prints whatever the frontend step did.
    """
    cfg = settings.build
    runner = _make_runner(settings)

    reporter.step(printer.BUILD, "Building all components...")

    reporter.step(printer.PACKAGE, "Checking backend dependencies...")
    backend = runner.run(cfg.package_manager, cfg.install_args, cwd=cfg.backend_dir)
    if backend.status is RunStatus.SPAWN_ERROR:
        reporter.failure(f"Failed to run backend build: {backend.error}")
        return False
    if not backend.succeeded:
        reporter.failure("Backend build failed")
        return False
    reporter.success("Backend dependencies OK")

    reporter.step(printer.FRONTEND, "Building frontend...")
    frontend = runner.run(cfg.package_manager, cfg.build_args, cwd=cfg.frontend_dir)
    if frontend.status is RunStatus.SPAWN_ERROR:
        reporter.failure(f"Failed to run frontend build: {frontend.error}")
    elif not frontend.succeeded:
        reporter.failure("Frontend build failed")
    else:
        reporter.success("Frontend build successful")

    reporter.done("Build process completed!")
    return frontend.succeeded


# ---------------------------------------------------------------------------
# start
# ---------------------------------------------------------------------------


def start(settings: Settings, reporter: Reporter) -> bool:
    """Print how to start each service by hand. Starts nothing."""
    cfg = settings.build
    pm = cfg.package_manager
    backend_dir = Path(cfg.backend_dir).name or cfg.backend_dir
    frontend_dir = Path(cfg.frontend_dir).name or cfg.frontend_dir

    reporter.step(printer.START, "Starting all services...")
    reporter.line()
    reporter.hint("To start services manually:")
    reporter.line(f"   Backend:  cd {backend_dir} && {' '.join([pm, *cfg.start_args])}")
    reporter.line(f"   Frontend: cd {frontend_dir} && {' '.join([pm, *cfg.dev_args])}")
    reporter.line(f"   DevOps:   {reporter.prog} {Command.HEALTH.value}")
    return True


# ---------------------------------------------------------------------------
# stop
# ---------------------------------------------------------------------------


def stop(settings: Settings, reporter: Reporter) -> bool:
    """Kill processes matching the configured patterns, without verifying."""
    runner = _make_runner(settings)

    reporter.step(printer.STOP, "Stopping services...")
    for pattern in settings.stop.patterns:
        result = runner.terminate_matching(pattern)
        logger.debug("Kill pattern %r: %s", pattern, result.status.value)

    reporter.success("Services stopped")
    return True


# ---------------------------------------------------------------------------
# test
# ---------------------------------------------------------------------------


def api_test(settings: Settings, reporter: Reporter) -> bool:
    """Run the health, addition and error-handling checks in order."""
    reporter.step(printer.TEST, "Testing API endpoints...")
    return asyncio.run(_api_test(settings, reporter))


async def _api_test(settings: Settings, reporter: Reporter) -> bool:
    smoke = settings.smoke
    async with _make_client(settings) as client:
        reporter.begin_check("Testing health endpoint")
        health_ok = _report_health_check(await client.probe_health(), reporter)

        reporter.begin_check("Testing addition endpoint")
        add_ok = _report_add_check(
            await client.probe_add(
                smoke.num1, smoke.num2, smoke.expected_sum, tolerance=smoke.tolerance
            ),
            reporter,
        )

        reporter.begin_check("Testing error handling")
        error_ok = _report_error_check(
            await client.probe_error_handling(smoke.invalid_payload), reporter
        )

    reporter.done("API tests completed!")
    return health_ok and add_ok and error_ok


def _report_health_check(result: ProbeResult, reporter: Reporter) -> bool:
    # Reachability only; the body is not inspected here
    if result.outcome is ProbeOutcome.CONNECTION_ERROR:
        reporter.check_failed("Connection failed")
        return False
    if not result.status_ok:
        reporter.check_failed(f"Status: {result.status_text}")
        return False
    reporter.check_passed()
    return True


def _report_add_check(result: ProbeResult, reporter: Reporter) -> bool:
    outcome = result.outcome
    if outcome is ProbeOutcome.OK:
        reporter.check_passed(f"Sum calculation correct: {_json(result.value)}")
    elif outcome is ProbeOutcome.MISMATCH:
        reporter.check_failed(f"Incorrect sum: {_json(result.value)}")
        logger.debug("Expected sum %s, got %s", result.expected, _json(result.value))
    elif outcome is ProbeOutcome.MISSING_FIELD:
        reporter.check_failed("No sum field in response")
    elif outcome is ProbeOutcome.INVALID_JSON:
        reporter.check_failed("Invalid JSON response")
    elif outcome is ProbeOutcome.BAD_STATUS:
        reporter.check_failed(f"Status: {result.status_text}")
    else:
        reporter.check_failed(f"Request failed: {result.error}")
    return result.passed


def _report_error_check(result: ProbeResult, reporter: Reporter) -> bool:
    if result.outcome is ProbeOutcome.OK:
        reporter.check_passed("Error handling works")
    elif result.outcome is ProbeOutcome.CONNECTION_ERROR:
        reporter.check_failed(f"Request failed: {result.error}")
    else:
        reporter.check_failed(f"Expected 400, got: {result.status_text}")
    return result.passed


HANDLERS: dict[Command, Handler] = {
    Command.HEALTH: health,
    Command.BUILD: build,
    Command.START: start,
    Command.STOP: stop,
    Command.TEST: api_test,
}
