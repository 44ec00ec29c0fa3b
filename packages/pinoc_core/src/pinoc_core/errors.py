from __future__ import annotations

from collections.abc import Sequence


class PinocError(RuntimeError):
    pass


class ValidationError(PinocError):
    pass


class ConfigurationError(PinocError):
    pass


class MissingArtifactError(PinocError):
    pass


class FileSystemError(PinocError):
    def __init__(self, message: str, *, path: object | None = None) -> None:
        super().__init__(message)
        self.path = path


class ToolInvocationError(PinocError):
    """An external tool could not be started or exited non-zero."""

    def __init__(
        self,
        message: str,
        *,
        argv: Sequence[str] = (),
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr


class MissingToolError(ToolInvocationError):
    pass
