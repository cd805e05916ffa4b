"""
Frame Extractor
Decomposes a staged multi-frame GIF into a numbered sequence of PNG stills
"""

import glob
import logging
import os
from typing import List, Optional, Sequence

from .contracts import FRAME_GLOB, FRAME_PATTERN
from .staging import StagingDirectory
from .tool_runner import SubprocessToolRunner, ToolRunner, expand_args

# convert -coalesce in.gif -scene 1 frame_%05d.png
DEFAULT_CONVERT_ARGS = ['-coalesce', '{input}', '-scene', '1', '{pattern}']


class FrameExtractor:
    """Runs ImageMagick's convert to split a GIF into coalesced frames"""

    def __init__(self, runner: Optional[ToolRunner] = None, binary: str = 'convert',
                 args: Optional[Sequence[str]] = None, logger: Optional[logging.Logger] = None):
        self.runner = runner or SubprocessToolRunner()
        self.binary = binary
        self.args = list(args) if args is not None else list(DEFAULT_CONVERT_ARGS)
        self.logger = logger or logging.getLogger(__name__)

    def build_args(self, staging_dir: StagingDirectory, first_only: bool = False) -> List[str]:
        input_name = staging_dir.input_name
        if first_only:
            # ImageMagick frame selector: only the first frame is read
            input_name += '[0]'
        return expand_args(self.args, input=input_name, pattern=FRAME_PATTERN)

    def extract_frames(self, staging_dir: StagingDirectory, first_only: bool = False) -> List[str]:
        """
        Write frame_00001.png, frame_00002.png, ... next to the staged input.

        Must be called at most once per staging directory.

        Args:
            staging_dir: Directory holding the staged input
            first_only: Extract only the first frame

        Returns:
            Sorted paths of the extracted frames

        Raises:
            ToolError: convert exited non-zero or could not be launched
        """
        self.logger.info(f"Extracting frames in {staging_dir}")
        self.runner.run(self.binary, self.build_args(staging_dir, first_only), cwd=staging_dir.path)

        frames = sorted(glob.glob(os.path.join(staging_dir.path, FRAME_GLOB)))
        self.logger.debug(f"Extracted {len(frames)} frames in {staging_dir}")
        return frames
