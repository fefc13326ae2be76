from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Severity = Literal["error", "warning", "information"]

DEFAULT_SEVERITY_BY_CODE: dict[str, Severity] = {
    "tasks_unreadable": "warning",
    "tasks_write_failed": "warning",
}


@dataclass
class DoneListError(Exception):
    code: str
    message: str
    detail: str | None = None
    severity: Severity = "error"

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message} ({self.detail})"
        return self.message


def format_error(error: BaseException) -> tuple[str, Severity]:
    if isinstance(error, DoneListError):
        prefix = f"[{error.code}] " if error.code else ""
        severity = DEFAULT_SEVERITY_BY_CODE.get(error.code, error.severity)
        return f"{prefix}{error}", severity
    return f"{error}", "error"


def wrap_error(
    error: BaseException,
    *,
    code: str,
    message: str,
    severity: Severity = "error",
) -> DoneListError:
    if isinstance(error, DoneListError):
        return error
    detail = str(error)
    return DoneListError(code=code, message=message, detail=detail, severity=severity)
