import io
import os
from pathlib import Path

import pytest
from PIL import Image

from gifserver.contracts import frame_filename
from gifserver.exceptions import ToolError
from gifserver.tool_runner import ToolResult, ToolRunner


def make_gif_bytes(width=31, height=21, frames=3):
    """Build an animated GIF in memory"""
    images = [Image.new('P', (width, height), color=i * 40) for i in range(frames)]
    buffer = io.BytesIO()
    images[0].save(buffer, format='GIF', save_all=True, append_images=images[1:],
                   duration=80, loop=0)
    return buffer.getvalue()


class RecordingToolRunner(ToolRunner):
    """Fake runner that records invocations and writes plausible outputs into cwd"""

    def __init__(self, frames=3, fail_binary=None, exit_code=1, stderr='boom', skip_output=False):
        self.calls = []
        self.frames = frames
        self.fail_binary = fail_binary
        self.exit_code = exit_code
        self.stderr = stderr
        self.skip_output = skip_output

    def run(self, binary, args, cwd):
        args = list(args)
        self.calls.append((binary, args, cwd))
        if binary == self.fail_binary:
            raise ToolError(binary, self.exit_code, self.stderr, path=cwd)

        if not self.skip_output:
            if binary == 'convert':
                count = 1 if args[1].endswith('[0]') else self.frames
                for index in range(1, count + 1):
                    Path(cwd, frame_filename(index)).write_bytes(b'\x89PNG frame %d' % index)
            else:
                Path(cwd, args[-1]).write_bytes(b'encoded-' + binary.encode())

        return ToolResult(binary=binary, args=args, cwd=cwd, returncode=0)


@pytest.fixture
def gif_bytes():
    return make_gif_bytes()


@pytest.fixture
def gif_file(tmp_path, gif_bytes):
    path = tmp_path / 'input.gif'
    path.write_bytes(gif_bytes)
    return path


@pytest.fixture
def recording_runner():
    return RecordingToolRunner()


@pytest.fixture
def staging_root(tmp_path):
    root = tmp_path / 'staging'
    root.mkdir()
    return root


def list_dirs(root):
    return sorted(p for p in os.listdir(root))
