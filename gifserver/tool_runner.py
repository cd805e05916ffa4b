"""
External Tool Runner
Runs ImageMagick/FFmpeg style binaries inside a working directory and turns
failures into ToolError
"""

import logging
import shlex
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .exceptions import ToolError


@dataclass
class ToolResult:
    """Outcome of a successful tool invocation"""
    binary: str
    args: List[str]
    cwd: str
    returncode: int
    stdout: str = ''
    stderr: str = ''


class ToolRunner(ABC):
    """Runs an external binary with an argument list in a working directory"""

    @abstractmethod
    def run(self, binary: str, args: Sequence[str], cwd: str) -> ToolResult:
        """
        Run a tool to completion.

        Args:
            binary: Executable name or path
            args: Arguments, passed without shell interpretation
            cwd: Working directory; relative input/output names resolve against it

        Returns:
            ToolResult for a zero exit status

        Raises:
            ToolError: non-zero exit, timeout or launch failure
        """
        pass


class SubprocessToolRunner(ToolRunner):
    """ToolRunner backed by subprocess.run"""

    def __init__(self, timeout: Optional[float] = None, logger: Optional[logging.Logger] = None):
        """
        Args:
            timeout: Seconds before the child is killed, None or 0 for no limit
            logger: Logger for command lines and failures
        """
        self.timeout = timeout or None
        self.logger = logger or logging.getLogger(__name__)

    def run(self, binary: str, args: Sequence[str], cwd: str) -> ToolResult:
        cmd = [binary] + [str(a) for a in args]
        self.logger.debug(f"Running in {cwd}: {shlex.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding='utf-8',
                errors='replace',
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired as e:
            stderr = e.stderr or ''
            if isinstance(stderr, bytes):
                stderr = stderr.decode('utf-8', errors='replace')
            self.logger.error(f"{binary} timed out after {self.timeout}s in {cwd}")
            raise ToolError(binary, None, stderr, path=cwd,
                            message=f"{binary} timed out after {self.timeout}s") from e
        except OSError as e:
            # Missing binary, permission denied, bad cwd
            self.logger.error(f"Could not launch {binary}: {e}")
            raise ToolError(binary, None, str(e), path=cwd,
                            message=f"Could not launch {binary}: {e}") from e

        if result.returncode != 0:
            self.logger.error(f"{binary} failed with status {result.returncode} in {cwd}: {result.stderr.strip()}")
            raise ToolError(binary, result.returncode, result.stderr, path=cwd)

        return ToolResult(
            binary=binary,
            args=cmd[1:],
            cwd=cwd,
            returncode=result.returncode,
            stdout=result.stdout or '',
            stderr=result.stderr or ''
        )


def expand_args(template: Sequence[str], **values: str) -> List[str]:
    """Substitute {input}, {pattern}, {output} style placeholders in an argument template"""
    args = []
    for arg in template:
        arg = str(arg)
        for key, value in values.items():
            arg = arg.replace('{' + key + '}', value)
        args.append(arg)
    return args
