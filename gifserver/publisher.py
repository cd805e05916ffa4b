"""
Result Publisher
Copies a finished artifact out of its staging directory to a stable destination
"""

import logging
import os
import shutil
import tempfile
from typing import Optional

from .exceptions import PublishError

COPY_CHUNK_SIZE = 1024 * 1024


class ResultPublisher:
    """Publishes artifacts by full-content copy"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def publish(self, src_path: str, dest_path: str) -> int:
        """
        Copy src_path to dest_path, flushed and fsynced before returning.

        The source is copied, never moved, so it stays valid for anyone still
        reading it from the staging directory. The copy goes to a temporary
        file beside the destination and is renamed into place once complete,
        so dest_path never holds partial content.

        Returns:
            Number of bytes written

        Raises:
            PublishError: source unreadable or destination unwritable
        """
        self.logger.info(f"Copying {src_path} to {dest_path}")
        dest_dir = os.path.dirname(os.path.abspath(dest_path))
        part_path = None
        try:
            with open(src_path, 'rb') as src:
                os.makedirs(dest_dir, exist_ok=True)
                fd, part_path = tempfile.mkstemp(prefix=f".{os.path.basename(dest_path)}.",
                                                 suffix='.part', dir=dest_dir)
                with os.fdopen(fd, 'wb') as dest:
                    shutil.copyfileobj(src, dest, COPY_CHUNK_SIZE)
                    dest.flush()
                    os.fsync(dest.fileno())
                    written = dest.tell()
            shutil.copymode(src_path, part_path)
            os.replace(part_path, dest_path)
        except OSError as e:
            self.logger.error(f"Failed to publish {src_path} to {dest_path}: {e}")
            if part_path is not None:
                self._discard(part_path)
            raise PublishError(f"Failed to publish {src_path}: {e}", dest_path) from e

        self.logger.debug(f"Published {written} bytes to {dest_path}")
        return written

    def _discard(self, path: str):
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning(f"Could not remove partial copy {path}: {e}")
