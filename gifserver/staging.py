"""
Staging Area Manager
Creates one exclusively owned temporary directory per conversion request,
stages the uploaded payload into it and guarantees its removal
"""

import contextlib
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator, Optional

from .contracts import INPUT_FILENAME
from .exceptions import StagingError

COPY_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class StagingDirectory:
    """Handle to a staging directory owned by a single request"""
    path: str
    input_name: str = field(default=INPUT_FILENAME)

    @property
    def input_path(self) -> str:
        return os.path.join(self.path, self.input_name)

    def join(self, name: str) -> str:
        return os.path.join(self.path, name)

    def exists(self) -> bool:
        return os.path.isdir(self.path)

    def __str__(self) -> str:
        return self.path


class StagingArea:
    """Allocates, populates and removes staging directories"""

    def __init__(self, temp_root: Optional[str] = None, prefix: str = 'gifserver',
                 logger: Optional[logging.Logger] = None):
        """
        Args:
            temp_root: Parent directory for staging directories, None for the system temp root
            prefix: Name prefix of each staging directory
            logger: Logger for lifecycle events
        """
        self.temp_root = temp_root or None
        self.prefix = prefix
        self.logger = logger or logging.getLogger(__name__)

    def stage(self, stream: BinaryIO) -> StagingDirectory:
        """
        Copy a stream byte-for-byte into a fresh staging directory.

        Raises:
            StagingError: directory allocation or the copy failed; nothing is left behind
        """
        try:
            if self.temp_root:
                os.makedirs(self.temp_root, exist_ok=True)
            path = tempfile.mkdtemp(prefix=self.prefix, dir=self.temp_root)
        except OSError as e:
            self.logger.error(f"Could not create staging directory under {self.temp_root or tempfile.gettempdir()}: {e}")
            raise StagingError(f"Could not create staging directory: {e}", self.temp_root) from e

        staging_dir = StagingDirectory(path)
        try:
            with open(staging_dir.input_path, 'wb') as output:
                shutil.copyfileobj(stream, output, COPY_CHUNK_SIZE)
        except (OSError, ValueError) as e:
            # ValueError covers reads from a closed stream
            self.logger.error(f"Could not stage input into {path}: {e}")
            self.cleanup(staging_dir)
            raise StagingError(f"Could not stage input: {e}", path) from e

        self.logger.debug(f"Staged {os.path.getsize(staging_dir.input_path)} bytes into {path}")
        return staging_dir

    def cleanup(self, staging_dir: StagingDirectory) -> None:
        """Recursively remove a staging directory. Never raises."""
        path = str(staging_dir)
        self.logger.debug(f"Removing {path}")
        try:
            shutil.rmtree(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning(f"Could not remove staging directory {path}: {e}")

    @contextlib.contextmanager
    def staged(self, stream: BinaryIO) -> Iterator[StagingDirectory]:
        """Stage a stream and remove the directory on every exit path"""
        staging_dir = self.stage(stream)
        try:
            yield staging_dir
        finally:
            self.cleanup(staging_dir)
