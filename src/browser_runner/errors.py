import json
from typing import Optional, Dict, Any


class BrowserRunnerError(Exception):
    """Base error for browser-runner with message, detail and extra context."""

    exit_code = 1

    def __init__(
        self,
        message: str,
        detail: Optional[str] = None,
        **kwargs: Any
    ):
        self.message = message
        self.detail = detail
        self.extra = kwargs
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary format."""
        error_dict = {
            "message": self.message,
            "detail": self.detail,
        }
        error_dict.update(self.extra)
        return {k: v for k, v in error_dict.items() if v is not None}

    def to_json(self) -> str:
        """Convert error to JSON string."""
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def __str__(self) -> str:
        parts = [f"Error: {self.message}"]
        if self.detail:
            parts.append(f"Detail: {self.detail}")
        return "\n".join(parts)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message='{self.message}', detail='{self.detail}', extra={self.extra})"


class InputError(BrowserRunnerError):
    """No usable automation source could be resolved."""

    exit_code = 2


class ToolkitInstallError(BrowserRunnerError):
    """The automation toolkit is missing and could not be installed."""

    def __init__(self, message: str, detail: Optional[str] = None, command: Optional[str] = None, **kwargs: Any):
        super().__init__(message, detail, command=command, **kwargs)
        self.command = command


class ExecutionError(BrowserRunnerError):
    """An automation unit raised while it was being executed."""

    def __init__(self, message: str, detail: Optional[str] = None, traceback_text: Optional[str] = None, **kwargs: Any):
        super().__init__(message, detail, **kwargs)
        self.traceback_text = traceback_text


class InvalidTransitionError(BrowserRunnerError):
    """A script run was moved to a phase it cannot reach from its current one."""
