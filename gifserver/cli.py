"""
Command Line Interface for GIF Server
Argument parsing and command execution around GifConverter
"""

import argparse
import sys
from typing import List, Optional

from .logger_setup import setup_logging
from .config_manager import ConfigManager
from .converter import GifConverter
from .error_handler import ErrorHandler
from .exceptions import ConversionError
from .file_validator import FileValidator
from .strategies import StrategyFactory

logger = None  # Will be initialized after logging setup


def non_negative_int(value: str) -> int:
    """argparse type for pixel limits"""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


class GifServerCLI:
    def __init__(self):
        self.config = None
        self.converter = None
        self.error_handler = ErrorHandler()

    def main(self, argv: Optional[List[str]] = None) -> int:
        """Main entry point"""
        args = self._parse_arguments(argv)

        self.config = ConfigManager(args.config_dir)

        global logger
        effective_level = 'DEBUG' if args.debug else args.log_level
        logger = setup_logging(self.config.get('logging'), log_level=effective_level, log_file=args.log_file)

        self.config.update_from_args({
            'gifserver.staging.temp_root': args.temp_dir,
            'gifserver.tools.convert': args.convert_binary,
            'gifserver.tools.ffmpeg': args.ffmpeg_binary,
            'gifserver.tools.timeout_seconds': args.timeout,
        })
        if not self.config.validate_config():
            logger.error("Invalid configuration, aborting")
            return 2

        if args.command == 'strategies':
            return self._list_strategies()
        if args.command == 'check':
            return self._check(args)
        if args.command == 'convert':
            return self._convert(args)

        logger.error("No command given, see --help")
        return 2

    def _parse_arguments(self, argv: Optional[List[str]] = None) -> argparse.Namespace:
        """Parse command line arguments"""
        parser = argparse.ArgumentParser(
            prog='gifserver',
            description="GIF Server - Convert animated GIFs to MP4, OGV or a still frame",
            epilog="Examples:\n"
                   "  %(prog)s convert in.gif out.mp4 -s frames-mp4\n"
                   "  %(prog)s convert in.gif poster.png -s first-frame --max-width 1024\n"
                   "  %(prog)s check in.gif --max-width 800 --max-height 600\n"
                   "  %(prog)s strategies\n",
            formatter_class=argparse.RawDescriptionHelpFormatter
        )

        # Global options
        parser.add_argument('--config-dir', help='Configuration directory (default: packaged config)')
        parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                            default='WARNING', help='Console log level (default: WARNING)')
        parser.add_argument('-v', '--debug', action='store_true', help='Verbose console output')
        parser.add_argument('--log-file', help='Also write DEBUG logs to this file')
        parser.add_argument('--temp-dir', help='Parent directory for staging directories')
        parser.add_argument('--convert-binary', help='ImageMagick convert executable')
        parser.add_argument('--ffmpeg-binary', help='ffmpeg executable')
        parser.add_argument('--timeout', type=float, metavar='SECONDS',
                            help='Kill external tools after SECONDS (0 = no limit)')

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        convert_parser = subparsers.add_parser('convert', aliases=['c'], help='Convert a GIF')
        convert_parser.add_argument('input', help="Input GIF file ('-' for stdin)")
        convert_parser.add_argument('output', help='Destination file')
        convert_parser.add_argument('-s', '--strategy', choices=StrategyFactory.list_strategies(),
                                    default='frames-mp4', help='Conversion pipeline (default: frames-mp4)')
        convert_parser.add_argument('--max-width', type=non_negative_int, metavar='PX', help='Reject wider inputs (0 = no limit)')
        convert_parser.add_argument('--max-height', type=non_negative_int, metavar='PX', help='Reject taller inputs (0 = no limit)')

        check_parser = subparsers.add_parser('check', help='Check GIF dimensions against limits')
        check_parser.add_argument('input', help='Input GIF file')
        check_parser.add_argument('--max-width', type=non_negative_int, default=0, metavar='PX')
        check_parser.add_argument('--max-height', type=non_negative_int, default=0, metavar='PX')

        subparsers.add_parser('strategies', help='List conversion strategies')

        args = parser.parse_args(argv)
        if args.command == 'c':
            args.command = 'convert'
        return args

    def _list_strategies(self) -> int:
        for name in StrategyFactory.list_strategies():
            print(name)
        return 0

    def _check(self, args) -> int:
        validator = FileValidator(self.config.get('gifserver.validation.expected_format', 'GIF'))
        try:
            with open(args.input, 'rb') as f:
                width, height = validator.check_dimensions(f, args.max_width, args.max_height)
        except (ConversionError, OSError, ValueError) as e:
            error = self.error_handler.handle_error(e, args.input, context='check')
            print(f"{args.input}: {error.message}", file=sys.stderr)
            return 1
        print(f"{args.input}: {width}x{height}")
        return 0

    def _convert(self, args) -> int:
        self.converter = GifConverter(self.config)
        try:
            if args.input == '-':
                self.converter.convert(sys.stdin.buffer, args.strategy, args.output,
                                       args.max_width, args.max_height)
            else:
                with open(args.input, 'rb') as f:
                    self.converter.convert(f, args.strategy, args.output, args.max_width, args.max_height)
        except (ConversionError, OSError, ValueError) as e:
            error = self.error_handler.handle_error(e, args.input, context=args.strategy)
            print(f"Conversion failed ({error.category.value}): {error.message}", file=sys.stderr)
            return 1

        logger.info(f"Wrote {args.output}")
        print(args.output)
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    return GifServerCLI().main(argv)
