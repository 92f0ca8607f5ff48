"""Top-level run: discover, build, execute, report."""

import asyncio
import enum
import logging
import shutil
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from security_test_runner.builder import build_test_list
from security_test_runner.discovery import discover_tools, require_package_manager
from security_test_runner.errors import SecurityTestRunnerError
from security_test_runner.executor import TestExecutor
from security_test_runner.models.config import RunConfig
from security_test_runner.models.result import TestResult
from security_test_runner.reporting import (
    ReportPaths,
    get_environment,
    log_results_summary,
    summarize,
    write_reports,
)
from security_test_runner.tools.base import SecurityTool, Which

log = logging.getLogger(__name__)


class RunState(enum.StrEnum):
    """Stages of a run, in order."""

    IDLE = "idle"
    DISCOVERING = "discovering"
    BUILDING = "building"
    EXECUTING = "executing"
    REPORTING = "reporting"
    DONE = "done"


@dataclass(kw_only=True)
class SecurityTestRunner:
    """Drives one run through its stages and computes the exit code.

    Fatal preconditions (no package manager, nothing to run) end the run
    before any test starts and before any report is written.
    """

    config: RunConfig
    tools: Sequence[SecurityTool]
    which: Which = shutil.which
    state: RunState = field(default=RunState.IDLE, init=False)
    results: Sequence[TestResult] = field(default=(), init=False)
    reports: ReportPaths | None = field(default=None, init=False)

    async def run(self) -> int:
        """Run all available tests and return the process exit code."""
        try:
            self.state = RunState.DISCOVERING
            package_manager = require_package_manager(self.which)
            log.info("Using package manager: %s", package_manager)
            availability = discover_tools(self.tools, self.config, self.which)

            if (
                availability.is_available("snyk")
                and not self.config.skip_snyk
                and self.config.snyk_token is None
            ):
                log.warning("SNYK_TOKEN is not set, Snyk may fail to authenticate")

            self.state = RunState.BUILDING
            test_definitions = build_test_list(
                self.tools, availability, package_manager, self.config
            )
        except SecurityTestRunnerError as exc:
            log.error("%s", exc)
            self.state = RunState.DONE
            return 1

        log.info("Total tests to run: %d", len(test_definitions))

        self.state = RunState.EXECUTING
        loop = asyncio.get_running_loop()
        started_at = datetime.now().astimezone()
        start = loop.time()
        self.results = await TestExecutor(config=self.config).run_tests(
            test_definitions
        )
        duration = loop.time() - start

        self.state = RunState.REPORTING
        summary = summarize(self.results, duration, started_at, get_environment())
        self.reports = write_reports(
            summary,
            self.results,
            self.config.output_dir,
            json_output=self.config.json_output,
        )
        log_results_summary(log, summary, self.results, ci=self.config.ci)

        self.state = RunState.DONE
        return 0 if summary.succeeded else 1
