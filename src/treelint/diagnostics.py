"""Diagnostics about the input tree itself, collected during a lint run.

Lint records describe problems in the content. Diagnostics describe trees
the rules could not make sense of (a table without rows, say) and anything
the driver had to skip. They are collected only when the caller passes an
``errors`` list to `run_lint`.
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Any


class LintDiagnostic:
    """A problem with the shape of the input tree."""

    __slots__ = ("code", "message", "node_type")

    def __init__(self, code: str, node_type: str | None = None, message: str | None = None) -> None:
        self.code = code
        self.node_type = node_type
        self.message = message or code

    def __repr__(self) -> str:
        if self.node_type is not None:
            return f"LintDiagnostic({self.code!r}, node_type={self.node_type!r})"
        return f"LintDiagnostic({self.code!r})"

    def __str__(self) -> str:
        prefix = f"{self.node_type}: " if self.node_type is not None else ""
        if self.message != self.code:
            return f"{prefix}{self.code} - {self.message}"
        return f"{prefix}{self.code}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LintDiagnostic):
            return NotImplemented
        return self.code == other.code and self.node_type == other.node_type

    __hash__ = None  # Unhashable since we define __eq__


_ERROR_SINK: ContextVar[list[LintDiagnostic] | None] = ContextVar("treelint_error_sink", default=None)


def emit_lint_error(code: str, *, node: Any | None = None, message: str | None = None) -> None:
    """Record a diagnostic from within a rule callback.

    Diagnostics are appended to the active sink while `run_lint` is running
    with an ``errors`` list. If no sink is active, this is a no-op.
    """

    sink = _ERROR_SINK.get()
    if sink is None:
        return

    node_type = node.get("type") if isinstance(node, dict) else None
    sink.append(LintDiagnostic(str(code), node_type=node_type, message=message))
