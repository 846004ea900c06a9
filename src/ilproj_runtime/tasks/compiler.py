"""Runs an external compiler and turns its output into diagnostics."""

from __future__ import annotations

import subprocess
import threading
from enum import Enum
from pathlib import Path
from typing import IO, List, Optional, Sequence

import structlog
from pydantic import BaseModel, Field

from ilproj_runtime.core.exceptions import ArgumentInvalidError, ToolExecutionError

logger = structlog.get_logger()


class DiagnosticSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    MESSAGE = "message"


class ToolDiagnostic(BaseModel):
    """One line of compiler output."""

    severity: DiagnosticSeverity
    text: str
    stream: str = Field(..., pattern="^(stdout|stderr)$")


class ToolRunResult(BaseModel):
    command: List[str]
    exit_code: int
    diagnostics: List[ToolDiagnostic] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    @property
    def errors(self) -> List[ToolDiagnostic]:
        return [d for d in self.diagnostics if d.severity is DiagnosticSeverity.ERROR]

    @property
    def warnings(self) -> List[ToolDiagnostic]:
        return [d for d in self.diagnostics if d.severity is DiagnosticSeverity.WARNING]


def classify_output_line(line: str, stream: str = "stdout") -> DiagnosticSeverity:
    """Map a line of tool output to a severity.

    Everything on stderr is an error. On stdout a line mentioning "error"
    (any case) is an error, otherwise one mentioning "warning" is a warning.
    """
    if stream == "stderr":
        return DiagnosticSeverity.ERROR
    lowered = line.lower()
    if "error" in lowered:
        return DiagnosticSeverity.ERROR
    if "warning" in lowered:
        return DiagnosticSeverity.WARNING
    return DiagnosticSeverity.MESSAGE


class CompilerTask:
    """Wraps a command-line compiler such as ilasm as a build step."""

    def __init__(self, executable: str, arguments: Optional[Sequence[str]] = None, cwd: Optional[Path] = None):
        """Initialize compiler task.

        Args:
            executable: Compiler executable, a path or a name looked up on PATH
            arguments: Command-line arguments passed verbatim
            cwd: Working directory for the compiler process
        """
        if not executable:
            raise ArgumentInvalidError("executable must not be empty")
        self.executable = executable
        self.arguments = list(arguments or [])
        self.cwd = cwd

    @property
    def command(self) -> List[str]:
        return [self.executable, *self.arguments]

    def execute(self) -> ToolRunResult:
        """Run the compiler to completion.

        Returns:
            Result whose ``success`` is true iff the exit code is zero

        Raises:
            ToolExecutionError: the process could not be started
        """
        cmd = self.command
        logger.info("Running compiler", command=" ".join(cmd))
        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",  # Localised tool output need not be UTF-8
                bufsize=1,  # Line buffered
                cwd=str(self.cwd) if self.cwd else None,
            )
        except OSError as e:
            raise ToolExecutionError(f"Cannot start {self.executable}: {e}") from e

        diagnostics: List[ToolDiagnostic] = []
        pump_errors: List[BaseException] = []
        lock = threading.Lock()

        def _pump(stream_name: str, stream: IO[str]) -> None:
            for raw in stream:
                line = raw.rstrip("\r\n")
                diagnostic = ToolDiagnostic(
                    severity=classify_output_line(line, stream_name),
                    text=line,
                    stream=stream_name,
                )
                with lock:
                    diagnostics.append(diagnostic)
                self._log_diagnostic(diagnostic)

        def _pump_stderr() -> None:
            try:
                _pump("stderr", process.stderr)
            except Exception as e:
                pump_errors.append(e)
                process.kill()

        # stderr drains on its own thread so neither pipe can fill and block the child
        stderr_thread = threading.Thread(target=_pump_stderr, daemon=True)
        stderr_thread.start()
        try:
            _pump("stdout", process.stdout)
            exit_code = process.wait()
        except BaseException:
            # Nobody reads stdout any more; stop the child so stderr can reach EOF
            process.kill()
            process.wait()
            raise
        finally:
            stderr_thread.join()
            process.stdout.close()
            process.stderr.close()

        if pump_errors:
            raise ToolExecutionError(f"Failed reading output of {self.executable}: {pump_errors[0]}") from pump_errors[0]

        tool_name = Path(self.executable).name
        if exit_code != 0:
            logger.error("Compiler failed", tool=tool_name, exit_code=exit_code)
        else:
            logger.info("Compiler finished", tool=tool_name, exit_code=exit_code)
        return ToolRunResult(command=cmd, exit_code=exit_code, diagnostics=diagnostics)

    @staticmethod
    def _log_diagnostic(diagnostic: ToolDiagnostic) -> None:
        if diagnostic.severity is DiagnosticSeverity.ERROR:
            logger.error(diagnostic.text, stream=diagnostic.stream)
        elif diagnostic.severity is DiagnosticSeverity.WARNING:
            logger.warning(diagnostic.text, stream=diagnostic.stream)
        else:
            logger.info(diagnostic.text, stream=diagnostic.stream)
