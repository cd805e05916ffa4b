"""
GIF Converter
Orchestrates validation, staging, one conversion strategy, publishing and cleanup
for a single request
"""

import contextlib
import io
import logging
from typing import BinaryIO, Iterator, Optional

from .config_manager import ConfigManager
from .contracts import FIRST_FRAME
from .file_validator import FileValidator
from .frame_extractor import FrameExtractor
from .publisher import ResultPublisher
from .staging import StagingArea
from .strategies import ConversionResult, ConversionStrategy, StrategyFactory
from .tool_runner import SubprocessToolRunner, ToolRunner


class GifConverter:
    """Runs conversion requests; holds no per-request state"""

    def __init__(self, config: Optional[ConfigManager] = None, runner: Optional[ToolRunner] = None,
                 validator: Optional[FileValidator] = None, staging: Optional[StagingArea] = None,
                 publisher: Optional[ResultPublisher] = None, logger: Optional[logging.Logger] = None):
        self.config = config or ConfigManager()
        self.logger = logger or logging.getLogger(__name__)
        self.runner = runner or SubprocessToolRunner(
            timeout=self.config.get('gifserver.tools.timeout_seconds', 0),
            logger=self.logger
        )
        self.validator = validator or FileValidator(
            expected_format=self.config.get('gifserver.validation.expected_format', 'GIF'),
            logger=self.logger
        )
        self.staging = staging or StagingArea(
            temp_root=self.config.get('gifserver.staging.temp_root'),
            prefix=self.config.get('gifserver.staging.prefix', 'gifserver'),
            logger=self.logger
        )
        self.publisher = publisher or ResultPublisher(logger=self.logger)
        self.validation_enabled = bool(self.config.get('gifserver.validation.enabled', True))

    def create_strategy(self, name: str) -> ConversionStrategy:
        """Build a strategy wired to this converter's runner and configured argument tables"""
        strategy_class = StrategyFactory.get_class(name)
        extractor = FrameExtractor(
            runner=self.runner,
            binary=self.config.get('gifserver.tools.convert', 'convert'),
            args=self.config.get('gifserver.frames.convert_args'),
            logger=self.logger
        )
        kwargs = dict(
            runner=self.runner,
            extractor=extractor,
            ffmpeg_binary=self.config.get('gifserver.tools.ffmpeg', 'ffmpeg'),
            args=self.config.get_strategy_args(name),
            logger=self.logger
        )
        if name == FIRST_FRAME:
            kwargs['first_only'] = bool(self.config.get('gifserver.frames.first_frame_only_extract', False))
        return strategy_class(**kwargs)

    def _limits(self, max_width: Optional[int], max_height: Optional[int]):
        if max_width is None:
            max_width = int(self.config.get('gifserver.limits.max_width', 0) or 0)
        if max_height is None:
            max_height = int(self.config.get('gifserver.limits.max_height', 0) or 0)
        return max_width, max_height

    def _prepare_input(self, stream: BinaryIO, max_width: Optional[int], max_height: Optional[int],
                       validate_stream: Optional[BinaryIO]) -> BinaryIO:
        """Validate dimensions, returning the stream to stage"""
        if not self.validation_enabled:
            if max_width or max_height:
                self.logger.warning(f"Validation disabled, ignoring limits {max_width or 0}x{max_height or 0}")
            return stream

        max_width, max_height = self._limits(max_width, max_height)
        if validate_stream is not None:
            self.validator.check_dimensions(validate_stream, max_width, max_height)
            return stream

        if not stream.seekable():
            # Header parsing would consume bytes we still need to stage
            self.logger.debug("Input stream is not seekable, buffering it for validation")
            stream = io.BytesIO(stream.read())

        self.validator.check_dimensions(stream, max_width, max_height)
        return stream

    @contextlib.contextmanager
    def open_conversion(self, stream: BinaryIO, strategy: str, max_width: Optional[int] = None,
                        max_height: Optional[int] = None,
                        validate_stream: Optional[BinaryIO] = None) -> Iterator[ConversionResult]:
        """
        Convert a stream and yield the result while its staging directory exists.

        The staging directory is removed when the block exits, whether the
        conversion succeeded or not.

        Args:
            stream: Readable binary stream of the GIF
            strategy: Strategy name (see StrategyFactory.list_strategies())
            max_width: Width limit, 0 for none, None for the configured limit
            max_height: Height limit, 0 for none, None for the configured limit
            validate_stream: Separate handle on the same payload used only for validation

        Raises:
            UnknownStrategyError, DimensionError, DecodeError, StagingError, ToolError
        """
        conversion = self.create_strategy(strategy)
        stream = self._prepare_input(stream, max_width, max_height, validate_stream)

        with self.staging.staged(stream) as staging_dir:
            result = conversion.run(staging_dir)
            self.logger.info(f"{strategy} produced {result.output_path} ({result.size_bytes} bytes)")
            yield result

    def convert(self, stream: BinaryIO, strategy: str, destination: str, max_width: Optional[int] = None,
                max_height: Optional[int] = None, validate_stream: Optional[BinaryIO] = None) -> str:
        """
        Convert a stream and publish the artifact to destination.

        Returns:
            The destination path

        Raises:
            UnknownStrategyError, DimensionError, DecodeError, StagingError, PublishError, ToolError
        """
        with self.open_conversion(stream, strategy, max_width, max_height, validate_stream) as result:
            self.publisher.publish(result.output_path, destination)
        return destination
