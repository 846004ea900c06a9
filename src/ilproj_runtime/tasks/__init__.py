"""Build tasks used by ILProj projects."""

from .compiler import CompilerTask, DiagnosticSeverity, ToolDiagnostic, ToolRunResult, classify_output_line
from .references import REFERENCE_TEMPLATE, write_reference_stubs

__all__ = [
    "CompilerTask",
    "DiagnosticSeverity",
    "ToolDiagnostic",
    "ToolRunResult",
    "classify_output_line",
    "REFERENCE_TEMPLATE",
    "write_reference_stubs",
]
