"""GIF Server package root.

Export primary classes and CLI for convenience when installed via pip.
"""

from .cli import main as cli_main  # noqa: F401
from .config_manager import ConfigManager  # noqa: F401
from .converter import GifConverter  # noqa: F401
from .error_handler import ErrorHandler, ErrorCategory, ProcessingError  # noqa: F401
from .exceptions import (  # noqa: F401
    ConversionError,
    DecodeError,
    DimensionError,
    MissingOutputError,
    PublishError,
    StagingError,
    ToolError,
    UnknownStrategyError,
)
from .file_validator import FileValidator  # noqa: F401
from .frame_extractor import FrameExtractor  # noqa: F401
from .publisher import ResultPublisher  # noqa: F401
from .staging import StagingArea, StagingDirectory  # noqa: F401
from .strategies import (  # noqa: F401
    ConversionResult,
    ConversionStrategy,
    DirectToMP4Strategy,
    FirstFrameStrategy,
    FramesToMP4Strategy,
    FramesToOGVStrategy,
    StrategyFactory,
)
from .tool_runner import SubprocessToolRunner, ToolResult, ToolRunner  # noqa: F401
