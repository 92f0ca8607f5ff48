"""Test executor running scanner commands as local subprocesses."""

import asyncio
import logging
import os
import signal
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from security_test_runner.models.config import RunConfig
from security_test_runner.models.definition import TestDefinition
from security_test_runner.models.result import TestResult
from security_test_runner.tools.base import Verdict

log = logging.getLogger(__name__)

TIMEOUT_EXIT_CODE = 124
SPAWN_FAILURE_EXIT_CODE = 127
OUTPUT_TAIL_LINES = 20
# Bytes of captured output handed to tools that inspect it.
OUTPUT_READ_LIMIT = 1024 * 1024


@dataclass(frozen=True, kw_only=True)
class TestExecutor:
    """Runs test definitions sequentially or with bounded parallelism."""

    __test__ = False

    config: RunConfig

    async def run_tests(
        self, test_definitions: Sequence[TestDefinition]
    ) -> Sequence[TestResult]:
        """Run the given tests and return their results in definition order.

        In sequential mode with fail-fast enabled, tests after the first
        failure are not started and have no result.

        Args:
            test_definitions: Tests in definition order

        Returns:
            One result per executed test

        """
        if not test_definitions:
            log.info("No test definitions provided")
            return []

        try:
            self.config.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            log.error(
                "Cannot create output directory %s: %s", self.config.output_dir, exc
            )

        if self.config.parallel and len(test_definitions) > 1:
            log.info(
                "Running tests in parallel (max: %d)", self.config.max_parallel
            )
            results = await self._run_parallel(test_definitions)
        else:
            log.info("Running tests sequentially")
            results = await self._run_sequential(test_definitions)

        log.info("Test execution completed")
        return results

    async def _run_sequential(
        self, test_definitions: Sequence[TestDefinition]
    ) -> Sequence[TestResult]:
        results: list[TestResult] = []
        for test_definition in test_definitions:
            result = await self.run_test(test_definition)
            results.append(result)
            if self.config.fail_fast and not result.passed:
                log.error("Fail-fast enabled, stopping tests")
                break
        return results

    async def _run_parallel(
        self, test_definitions: Sequence[TestDefinition]
    ) -> Sequence[TestResult]:
        semaphore = asyncio.Semaphore(self.config.max_parallel)

        async def run_bounded(test_definition: TestDefinition) -> TestResult:
            async with semaphore:
                return await self.run_test(test_definition)

        results = await asyncio.gather(
            *(run_bounded(test_def) for test_def in test_definitions),
            return_exceptions=True,
        )
        return self._process_results(test_definitions, results)

    def _process_results(
        self,
        test_definitions: Sequence[TestDefinition],
        results: Sequence[TestResult | BaseException],
    ) -> Sequence[TestResult]:
        """Turn unexpected exceptions into failed results."""
        final_results: list[TestResult] = []

        for test_definition, result in zip(test_definitions, results, strict=True):
            if isinstance(result, TestResult):
                final_results.append(result)
            elif isinstance(result, Exception):
                log.error(
                    "Test execution failed: %s: %s",
                    test_definition.id,
                    result,
                    exc_info=result,
                )
                final_results.append(
                    TestResult(
                        id=test_definition.id,
                        name=test_definition.name,
                        exit_code=1,
                        raw_exit_code=1,
                        duration=0.0,
                        output_file=self.log_file(test_definition),
                        message=str(result),
                    )
                )
            else:
                raise result

        return final_results

    def log_file(self, test_definition: TestDefinition) -> Path:
        """Path of the combined stdout/stderr log for a test."""
        return self.config.output_dir / f"test-{test_definition.id}.log"

    async def run_test(self, test_definition: TestDefinition) -> TestResult:
        """Run a single test and classify its outcome."""
        output_file = self.log_file(test_definition)
        loop = asyncio.get_running_loop()

        log.info("Running: %s", test_definition.name)
        log.debug("Command: %s", test_definition.command)

        start = loop.time()
        try:
            raw_exit_code, timed_out = await self._execute(
                test_definition.command, output_file
            )
        except OSError as exc:
            log.error("%s could not be started: %s", test_definition.name, exc)
            return TestResult(
                id=test_definition.id,
                name=test_definition.name,
                exit_code=SPAWN_FAILURE_EXIT_CODE,
                raw_exit_code=SPAWN_FAILURE_EXIT_CODE,
                duration=loop.time() - start,
                output_file=output_file,
                message=str(exc),
            )
        duration = loop.time() - start

        if timed_out:
            verdict = Verdict(
                exit_code=TIMEOUT_EXIT_CODE,
                message=f"timed out after {self.config.timeout:g}s",
            )
        else:
            output = (
                read_log_tail(output_file)
                if test_definition.tool.inspects_output
                else ""
            )
            verdict = test_definition.tool.classify_result(raw_exit_code, output)

        result = TestResult(
            id=test_definition.id,
            name=test_definition.name,
            exit_code=verdict.exit_code,
            raw_exit_code=raw_exit_code,
            duration=duration,
            output_file=output_file,
            message=verdict.message,
            timed_out=timed_out,
        )
        self._log_result(result, verdict)
        return result

    async def _execute(self, command: str, output_file: Path) -> tuple[int, bool]:
        """Run a shell command with output redirected to a file.

        Returns:
            Exit code and whether the command was killed on timeout

        """
        with output_file.open("wb") as output:
            process = await asyncio.create_subprocess_shell(
                command,
                cwd=self.config.project_root,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=output,
                stderr=asyncio.subprocess.STDOUT,
                start_new_session=True,
            )
            try:
                exit_code = await asyncio.wait_for(
                    process.wait(), timeout=self.config.timeout
                )
            except TimeoutError:
                _kill(process)
                await process.wait()
                return TIMEOUT_EXIT_CODE, True

        return exit_code, False

    def _log_result(self, result: TestResult, verdict: Verdict) -> None:
        if result.passed:
            if verdict.warning:
                log.warning("%s %s", result.name, verdict.message)
            elif verdict.message:
                log.info("%s passed (%s)", result.name, verdict.message)
            else:
                log.info("%s passed", result.name)
            return

        if result.timed_out:
            log.error("%s %s", result.name, verdict.message)
        else:
            log.error("%s failed (exit code: %d)", result.name, result.exit_code)

        if self.config.verbose:
            self._log_output_tail(result.output_file)

    def _log_output_tail(self, output_file: Path) -> None:
        try:
            lines = output_file.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return
        log.debug("Output:")
        for line in lines.splitlines()[-OUTPUT_TAIL_LINES:]:
            log.debug("  %s", line)


def _kill(process: asyncio.subprocess.Process) -> None:
    """Kill a timed-out command along with any children it spawned."""
    try:
        if sys.platform == "win32":
            process.kill()
        else:
            os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def read_log_tail(output_file: Path, limit: int = OUTPUT_READ_LIMIT) -> str:
    """Read at most the last ``limit`` bytes of a log file."""
    with output_file.open("rb") as output:
        output.seek(0, os.SEEK_END)
        output.seek(max(output.tell() - limit, 0))
        return output.read().decode("utf-8", errors="replace")
