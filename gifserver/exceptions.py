"""
Conversion Exceptions
Error taxonomy shared by validation, staging, external tools and publishing

All diagnostic information (paths, exit codes, stderr) is logged right before
raising. The attributes exist so entry points can pick a response, not for
logging.
"""

from typing import Optional


class ConversionError(Exception):
    """Base exception for all conversion failures.

    Attributes:
        message: Human-readable error description
        path: File or directory involved, when there is one
    """

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path


class DimensionError(ConversionError):
    """Input declares a width or height above a configured limit"""

    def __init__(self, axis: str, actual: int, limit: int):
        super().__init__(f"Image {axis} too large {actual} > {limit}")
        self.axis = axis
        self.actual = actual
        self.limit = limit


class DecodeError(ConversionError):
    """Input header could not be parsed as the expected container format"""


class StagingError(ConversionError, OSError):
    """Filesystem failure while staging, copying or reading artifacts.

    Raised for:
    - Temporary directory allocation failures
    - Short or failed writes of the staged payload
    - Missing or unreadable artifacts
    """


class PublishError(StagingError):
    """Copying an artifact to its destination failed"""


class MissingOutputError(StagingError):
    """An external tool reported success but the expected artifact is absent"""


class ToolError(ConversionError):
    """External process exited non-zero, timed out or could not be launched.

    Attributes:
        tool: Binary that was invoked
        exit_code: Process exit status, None when the process never ran to completion
        stderr: Captured standard error text
    """

    def __init__(
        self,
        tool: str,
        exit_code: Optional[int],
        stderr: str = '',
        path: Optional[str] = None,
        message: Optional[str] = None,
    ):
        if message is None:
            if exit_code is None:
                message = f"{tool} failed to run"
            else:
                message = f"{tool} exited with status {exit_code}"
            detail = (stderr or '').strip()
            if detail:
                message += f": {detail.splitlines()[-1]}"
        super().__init__(message, path)
        self.tool = tool
        self.exit_code = exit_code
        self.stderr = stderr or ''


class UnknownStrategyError(ConversionError, ValueError):
    """Requested conversion strategy is not registered"""

    def __init__(self, name: str, available):
        super().__init__(f"Unknown conversion strategy '{name}' (available: {', '.join(available)})")
        self.name = name
        self.available = list(available)
