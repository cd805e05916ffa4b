"""
File Validation Module
Checks declared image dimensions against configured limits without decoding frames
"""

import io
import logging
import struct
from typing import BinaryIO, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from .exceptions import DecodeError, DimensionError

# Signature plus logical screen width and height
GIF_HEADER_SIZE = 10
GIF_SIGNATURES = (b'GIF87a', b'GIF89a')


class FileValidator:
    """Validates uploaded images before they are staged"""

    def __init__(self, expected_format: Optional[str] = 'GIF', logger: Optional[logging.Logger] = None):
        """
        Args:
            expected_format: PIL format name the header must declare, None to accept any image
            logger: Logger to report rejections to (defaults to the module logger)
        """
        self.expected_format = expected_format.upper() if expected_format else None
        self.logger = logger or logging.getLogger(__name__)

    def read_dimensions(self, stream: BinaryIO) -> Tuple[int, int]:
        """
        Read (width, height) from the image header.

        Pillow's Image.open is lazy: it parses the header and stops, so the
        pixel payload is never consumed. The stream position is restored when
        the stream is seekable, and the image is read from that position.
        """
        start = None
        try:
            if stream.seekable():
                start = stream.tell()
        except (AttributeError, OSError):
            start = None

        source = stream
        try:
            if start:
                # Image.open rewinds to offset 0
                source = io.BytesIO(stream.read())
            try:
                img = Image.open(source)
                image_format = img.format
                width, height = img.size
            except Image.DecompressionBombError as e:
                # Pillow refuses the pixel count; the declared size is still what limits apply to
                image_format = 'GIF'
                width, height = self._read_gif_screen(source, e)
            except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
                self.logger.warning(f"Could not parse image header: {e}")
                raise DecodeError(f"Could not parse image header: {e}") from e
        finally:
            if start is not None:
                stream.seek(start)

        if self.expected_format and image_format != self.expected_format:
            self.logger.warning(f"Rejected {image_format} input, expected {self.expected_format}")
            raise DecodeError(f"Expected {self.expected_format} image, got {image_format}")

        return width, height

    def _read_gif_screen(self, source: BinaryIO, cause: Exception) -> Tuple[int, int]:
        """Read the logical screen size straight from a GIF header"""
        header = b''
        if source.seekable():
            source.seek(0)
            header = source.read(GIF_HEADER_SIZE)
        if len(header) < GIF_HEADER_SIZE or header[:6] not in GIF_SIGNATURES:
            self.logger.warning(f"Could not parse image header: {cause}")
            raise DecodeError(f"Could not parse image header: {cause}") from cause
        return struct.unpack('<HH', header[6:10])

    def check_dimensions(self, stream: BinaryIO, max_width: int = 0, max_height: int = 0) -> Tuple[int, int]:
        """
        Check the declared dimensions of an image stream.

        Args:
            stream: Readable binary stream positioned at the start of the image
            max_width: Maximum width in pixels, 0 for no limit
            max_height: Maximum height in pixels, 0 for no limit

        Returns:
            The (width, height) read from the header

        Raises:
            DimensionError: an axis exceeds its non-zero limit (width is checked first)
            DecodeError: the header is not a parseable image of the expected format
        """
        if max_width < 0 or max_height < 0:
            raise ValueError(f"Dimension limits must be >= 0, got {max_width}x{max_height}")

        width, height = self.read_dimensions(stream)

        if max_width > 0 and width > max_width:
            self.logger.info(f"Rejected image: width {width} > {max_width}")
            raise DimensionError('width', width, max_width)

        if max_height > 0 and height > max_height:
            self.logger.info(f"Rejected image: height {height} > {max_height}")
            raise DimensionError('height', height, max_height)

        self.logger.debug(f"Image dimensions {width}x{height} within limits {max_width}x{max_height}")
        return width, height

    @staticmethod
    def check_path_dimensions(path: str, max_width: int = 0, max_height: int = 0,
                              expected_format: Optional[str] = 'GIF') -> Tuple[int, int]:
        """Convenience wrapper opening a file on disk"""
        with open(path, 'rb') as f:
            return FileValidator(expected_format).check_dimensions(f, max_width, max_height)
