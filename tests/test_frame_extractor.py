import io
import os

import pytest

from gifserver.exceptions import ToolError
from gifserver.frame_extractor import FrameExtractor
from gifserver.staging import StagingArea

from conftest import RecordingToolRunner


@pytest.fixture
def staging(staging_root):
    return StagingArea(temp_root=str(staging_root))


def test_extract_frames_invokes_convert_in_staging_dir(staging, gif_bytes, recording_runner):
    extractor = FrameExtractor(recording_runner)
    with staging.staged(io.BytesIO(gif_bytes)) as staging_dir:
        frames = extractor.extract_frames(staging_dir)

        assert recording_runner.calls == [
            ('convert', ['-coalesce', 'in.gif', '-scene', '1', 'frame_%05d.png'], staging_dir.path)
        ]
        assert [os.path.basename(f) for f in frames] == [
            'frame_00001.png', 'frame_00002.png', 'frame_00003.png'
        ]
        with open(staging_dir.input_path, 'rb') as f:
            assert f.read() == gif_bytes


def test_first_only_selects_frame_zero(staging, recording_runner):
    extractor = FrameExtractor(recording_runner)
    with staging.staged(io.BytesIO(b'GIF89a')) as staging_dir:
        frames = extractor.extract_frames(staging_dir, first_only=True)
        assert recording_runner.calls[0][1][1] == 'in.gif[0]'
        assert [os.path.basename(f) for f in frames] == ['frame_00001.png']


def test_custom_binary_and_args(staging, recording_runner):
    extractor = FrameExtractor(recording_runner, binary='/opt/im/bin/magick',
                               args=['convert', '{input}', '-coalesce', '{pattern}'])
    with staging.staged(io.BytesIO(b'GIF89a')) as staging_dir:
        extractor.extract_frames(staging_dir)
    binary, args, _ = recording_runner.calls[0]
    assert binary == '/opt/im/bin/magick'
    assert args == ['convert', 'in.gif', '-coalesce', 'frame_%05d.png']


def test_tool_failure_propagates(staging, staging_root):
    runner = RecordingToolRunner(fail_binary='convert', exit_code=1, stderr='convert: improper image header')
    extractor = FrameExtractor(runner)
    with pytest.raises(ToolError) as exc_info:
        with staging.staged(io.BytesIO(b'GIF89a')) as staging_dir:
            extractor.extract_frames(staging_dir)
    assert exc_info.value.exit_code == 1
    assert 'improper image header' in exc_info.value.stderr
    assert os.listdir(staging_root) == []
