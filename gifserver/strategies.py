"""
Conversion Strategies
Implements strategy pattern for the fixed set of GIF conversion pipelines
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Dict, List, Optional, Sequence, Type

from .contracts import (
    DIRECT_MP4,
    EVEN_DIMENSION_FILTER,
    FIRST_FRAME,
    FRAME_PATTERN,
    FRAMES_MP4,
    FRAMES_OGV,
    MP4_OUTPUT_FILENAME,
    OGV_OUTPUT_FILENAME,
    first_frame_filename,
)
from .exceptions import MissingOutputError, UnknownStrategyError
from .frame_extractor import FrameExtractor
from .staging import StagingDirectory
from .tool_runner import SubprocessToolRunner, ToolRunner, expand_args


@dataclass
class ConversionResult:
    """Artifact produced by a strategy run"""
    output_path: str
    strategy: str
    staging_dir: StagingDirectory

    @property
    def size_bytes(self) -> int:
        return os.path.getsize(self.output_path)

    @property
    def filename(self) -> str:
        return os.path.basename(self.output_path)


class ConversionStrategy(ABC):
    """Base class for conversion strategies"""

    name: ClassVar[str] = ''
    output_name: ClassVar[str] = ''
    default_args: ClassVar[List[str]] = []

    def __init__(self, runner: Optional[ToolRunner] = None, extractor: Optional[FrameExtractor] = None,
                 ffmpeg_binary: str = 'ffmpeg', args: Optional[Sequence[str]] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize strategy.

        Args:
            runner: Tool runner for ffmpeg invocations
            extractor: Frame extractor for frame-based pipelines (built on the same runner if omitted)
            ffmpeg_binary: Encoder binary name or path
            args: Encoder argument template, overriding the strategy default
            logger: Logger for pipeline events
        """
        self.runner = runner or SubprocessToolRunner()
        self.extractor = extractor or FrameExtractor(self.runner)
        self.ffmpeg_binary = ffmpeg_binary
        self.args = list(args) if args is not None else list(self.default_args)
        self.logger = logger or logging.getLogger(__name__)

    @abstractmethod
    def run(self, staging_dir: StagingDirectory) -> ConversionResult:
        """
        Produce one artifact inside the staging directory.

        Raises:
            ToolError: any external tool invocation failed
            MissingOutputError: a tool succeeded without writing the artifact
        """
        pass

    def build_args(self, input_name: str) -> List[str]:
        return expand_args(self.args, input=input_name, pattern=FRAME_PATTERN, output=self.output_name)

    def _encode(self, staging_dir: StagingDirectory, input_name: str) -> ConversionResult:
        self.logger.info(f"Encoding {staging_dir} to {os.path.splitext(self.output_name)[1].lstrip('.')}")
        self.runner.run(self.ffmpeg_binary, self.build_args(input_name), cwd=staging_dir.path)
        return self._result(staging_dir)

    def _result(self, staging_dir: StagingDirectory) -> ConversionResult:
        output_path = staging_dir.join(self.output_name)
        if not os.path.isfile(output_path) or not os.access(output_path, os.R_OK):
            self.logger.error(f"{self.name} produced no readable output at {output_path}")
            raise MissingOutputError(f"{self.name} produced no output", output_path)
        return ConversionResult(output_path=output_path, strategy=self.name,
                                staging_dir=staging_dir)


class DirectToMP4Strategy(ConversionStrategy):
    """Transcode the staged GIF straight to MP4"""

    name = DIRECT_MP4
    output_name = MP4_OUTPUT_FILENAME
    default_args = [
        '-y', '-i', '{input}',
        '-movflags', 'faststart',
        '-pix_fmt', 'yuv420p',
        '-vf', EVEN_DIMENSION_FILTER,
        '{output}',
    ]

    def run(self, staging_dir: StagingDirectory) -> ConversionResult:
        return self._encode(staging_dir, staging_dir.input_name)


class FramesToMP4Strategy(ConversionStrategy):
    """Extract coalesced frames, then encode the frame sequence to MP4"""

    name = FRAMES_MP4
    output_name = MP4_OUTPUT_FILENAME
    default_args = [
        '-y', '-i', '{pattern}',
        '-pix_fmt', 'yuv420p',
        '-vf', EVEN_DIMENSION_FILTER,
        '{output}',
    ]

    def run(self, staging_dir: StagingDirectory) -> ConversionResult:
        self.extractor.extract_frames(staging_dir)
        return self._encode(staging_dir, FRAME_PATTERN)


class FramesToOGVStrategy(ConversionStrategy):
    """Extract coalesced frames, then encode the frame sequence to Ogg Theora"""

    name = FRAMES_OGV
    output_name = OGV_OUTPUT_FILENAME
    default_args = [
        '-y', '-i', '{pattern}',
        '-q', '5',
        '-pix_fmt', 'yuv420p',
        '{output}',
    ]

    def run(self, staging_dir: StagingDirectory) -> ConversionResult:
        self.extractor.extract_frames(staging_dir)
        return self._encode(staging_dir, FRAME_PATTERN)


class FirstFrameStrategy(ConversionStrategy):
    """Extract frames and keep frame 1 as a PNG still"""

    name = FIRST_FRAME
    output_name = first_frame_filename()

    def __init__(self, *args, first_only: bool = False, **kwargs):
        super().__init__(*args, **kwargs)
        self.first_only = first_only

    def run(self, staging_dir: StagingDirectory) -> ConversionResult:
        self.logger.info(f"Extracting first frame of {staging_dir}")
        self.extractor.extract_frames(staging_dir, first_only=self.first_only)
        return self._result(staging_dir)


class StrategyFactory:
    """Factory for creating conversion strategies by name"""

    _strategies: ClassVar[Dict[str, Type[ConversionStrategy]]] = {
        DirectToMP4Strategy.name: DirectToMP4Strategy,
        FramesToMP4Strategy.name: FramesToMP4Strategy,
        FramesToOGVStrategy.name: FramesToOGVStrategy,
        FirstFrameStrategy.name: FirstFrameStrategy,
    }

    @classmethod
    def get_class(cls, name: str) -> Type[ConversionStrategy]:
        try:
            return cls._strategies[name]
        except KeyError:
            raise UnknownStrategyError(name, cls.list_strategies()) from None

    @classmethod
    def create(cls, name: str, **kwargs) -> ConversionStrategy:
        """Create a strategy; keyword arguments go to the strategy constructor"""
        return cls.get_class(name)(**kwargs)

    @classmethod
    def list_strategies(cls) -> List[str]:
        return list(cls._strategies.keys())
