"""
Executor Service

Runs one ad hoc automation script per invocation.
"""

import sys
import traceback
from typing import Optional, Sequence, TextIO, Tuple

from browser_runner.application.commands.resolve_source import resolve_source
from browser_runner.domain.entities import ScriptRun
from browser_runner.domain.ports import IModuleRunnerPort, IToolkitPort, IWorkspacePort
from browser_runner.domain.services import ERROR_SUGGESTIONS, describe_failure, find_suggestion
from browser_runner.domain.value_objects import ExecutionUnit, RunPhase
from browser_runner.errors import BrowserRunnerError, ExecutionError, InputError, ToolkitInstallError
from browser_runner.infrastructure.isolation.code_wrapper import wrap_if_needed
from browser_runner.infrastructure.logging import get_logger


def _exit_status(exc: SystemExit) -> int:
    code = exc.code
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    print(code, file=sys.stderr)
    return 1


class ExecutorService:
    """
    Main service for executing automation scripts.

    This service orchestrates the execution flow:
    1. Resolve the source from a file, inline arguments or stdin
    2. Make sure the toolkit is installed, installing it once if not
    3. Wrap the source in an async entry point when needed
    4. Delete units left by earlier runs and write the new one
    5. Execute the unit in-process and translate failures

    The unit written by a run is left on disk; the next run removes it.
    """

    def __init__(
        self,
        toolkit: IToolkitPort,
        workspace: IWorkspacePort,
        module_runner: IModuleRunnerPort,
        suggestions: Sequence[Tuple[str, str]] = ERROR_SUGGESTIONS,
    ):
        """
        Initialize the executor service.

        Args:
            toolkit: Toolkit availability check and installer
            workspace: Storage for execution units
            module_runner: Runner that executes a written unit
            suggestions: Ordered (substring, hint) table for failure messages
        """
        self._toolkit = toolkit
        self._workspace = workspace
        self._module_runner = module_runner
        self._suggestions = suggestions
        self.last_run: Optional[ScriptRun] = None

    def run(self, args: Sequence[str], stdin: Optional[TextIO] = None) -> int:
        """
        Execute one automation request to completion.

        Args:
            args: Positional command-line arguments
            stdin: Standard input stream

        Returns:
            Process exit status, 0 on success
        """
        script_run = ScriptRun()
        self.last_run = script_run
        logger = get_logger(__name__, run_id=script_run.run_id)

        print("Playwright Runner - Universal Executor\n", file=sys.stderr)

        try:
            self._prepare(script_run, args, stdin)
            script_run.advance(RunPhase.EXECUTING)
            print("Starting automation...\n", file=sys.stderr)
            self._module_runner.run(script_run.unit.temp_path)

        except InputError as e:
            script_run.mark_as_failed(e.message)
            logger.warning("No usable input", error=e.message)
            print(e.message, file=sys.stderr)
            if e.detail:
                print(e.detail, file=sys.stderr)
            return e.exit_code

        except ToolkitInstallError as e:
            script_run.mark_as_failed(e.message)
            print(f"{e.message}: {e.detail}" if e.detail else e.message, file=sys.stderr)
            return e.exit_code

        except SystemExit as e:
            status = _exit_status(e)
            if status == 0:
                script_run.mark_as_succeeded()
            else:
                script_run.mark_as_failed(f"Exited with status {status}")
                logger.warning("Execution unit exited with failure", exit_code=status)
            return status

        except Exception as e:
            message = e.message if isinstance(e, BrowserRunnerError) else str(e) or type(e).__name__
            script_run.mark_as_failed(message)
            failure = ExecutionError(
                message,
                detail=find_suggestion(message, self._suggestions),
                traceback_text="".join(traceback.format_exception(type(e), e, e.__traceback__)),
                phase=script_run.history[-1].value,
            )
            logger.error("Execution failed", **failure.to_dict())
            self._report_failure(failure)
            return failure.exit_code

        script_run.mark_as_succeeded()
        logger.info("Execution finished", duration_ms=script_run.duration_ms)
        return 0

    def _prepare(self, script_run: ScriptRun, args: Sequence[str], stdin: Optional[TextIO]) -> None:
        script_run.advance(RunPhase.RESOLVING_INPUT)
        script_run.source = resolve_source(args, stdin)

        script_run.advance(RunPhase.CHECKING_TOOLKIT)
        if not self._toolkit.is_installed():
            script_run.advance(RunPhase.INSTALLING)
            self._toolkit.install()

        script_run.advance(RunPhase.NORMALIZING)
        raw_source = script_run.source.text
        normalized = wrap_if_needed(raw_source)

        script_run.advance(RunPhase.CLEANING_STALE)
        self._workspace.cleanup_stale()

        script_run.advance(RunPhase.WRITING)
        temp_path = self._workspace.allocate_path()
        self._workspace.write_unit(temp_path, normalized)
        script_run.unit = ExecutionUnit(
            raw_source=raw_source,
            normalized_source=normalized,
            temp_path=temp_path,
        )

    def _report_failure(self, failure: ExecutionError) -> None:
        print(f"Execution failed: {describe_failure(failure.message, self._suggestions)}", file=sys.stderr)
        if failure.traceback_text:
            print("\nStack trace:", file=sys.stderr)
            print(failure.traceback_text, file=sys.stderr)
