"""
Integration tests against the real ImageMagick and FFmpeg binaries.
Skipped when either binary is not installed.
"""

import io
import os
import shutil

import pytest
from PIL import Image

from gifserver.config_manager import ConfigManager
from gifserver.converter import GifConverter
from gifserver.exceptions import ToolError
from gifserver.staging import StagingArea
from gifserver.strategies import StrategyFactory
from gifserver.tool_runner import SubprocessToolRunner

from conftest import make_gif_bytes

requires_tools = pytest.mark.skipif(
    shutil.which('convert') is None or shutil.which('ffmpeg') is None,
    reason="ImageMagick convert and ffmpeg are required"
)


@pytest.fixture
def staging(staging_root):
    return StagingArea(temp_root=str(staging_root))


@requires_tools
@pytest.mark.parametrize('name,output_name', [('frames-mp4', 'out.mp4'), ('frames-ogv', 'out.ogv')])
def test_frame_pipelines_produce_non_empty_output(staging, staging_root, name, output_name):
    runner = SubprocessToolRunner(timeout=120)
    # Odd dimensions exercise the even-dimension filter
    with staging.staged(io.BytesIO(make_gif_bytes(31, 21, frames=4))) as staging_dir:
        result = StrategyFactory.create(name, runner=runner).run(staging_dir)
        assert result.output_path == staging_dir.join(output_name)
        assert os.path.commonpath([result.output_path, staging_dir.path]) == staging_dir.path
        assert result.size_bytes > 0
    assert os.listdir(staging_root) == []


@requires_tools
def test_direct_mp4(staging):
    runner = SubprocessToolRunner(timeout=120)
    with staging.staged(io.BytesIO(make_gif_bytes(32, 24))) as staging_dir:
        result = StrategyFactory.create('direct-mp4', runner=runner).run(staging_dir)
        assert result.size_bytes > 0


@requires_tools
def test_first_frame_is_png_of_input_size(staging):
    runner = SubprocessToolRunner(timeout=120)
    with staging.staged(io.BytesIO(make_gif_bytes(31, 21, frames=3))) as staging_dir:
        result = StrategyFactory.create('first-frame', runner=runner).run(staging_dir)
        assert result.filename == 'frame_00001.png'
        with Image.open(result.output_path) as img:
            assert img.format == 'PNG'
            assert img.size == (31, 21)


@requires_tools
def test_corrupt_gif_fails_extraction(staging, staging_root):
    runner = SubprocessToolRunner(timeout=120)
    with pytest.raises(ToolError) as exc_info:
        with staging.staged(io.BytesIO(b'GIF89a garbage')) as staging_dir:
            StrategyFactory.create('frames-mp4', runner=runner).run(staging_dir)
    assert exc_info.value.exit_code not in (None, 0)
    assert os.listdir(staging_root) == []


@requires_tools
def test_converter_end_to_end(staging_root, tmp_path):
    config = ConfigManager()
    config.update_from_args({
        'gifserver.staging.temp_root': str(staging_root),
        'gifserver.tools.timeout_seconds': 120,
    })
    dest = tmp_path / 'published' / 'clip.mp4'
    GifConverter(config).convert(io.BytesIO(make_gif_bytes()), 'frames-mp4', str(dest))
    assert dest.stat().st_size > 0
    assert os.listdir(staging_root) == []


def test_always_failing_tool_leaves_staging_removable(staging, staging_root):
    false_binary = shutil.which('false')
    if false_binary is None:
        pytest.skip("'false' is not available")
    strategy = StrategyFactory.create('direct-mp4', runner=SubprocessToolRunner(), ffmpeg_binary=false_binary)
    staging_dir = staging.stage(io.BytesIO(make_gif_bytes()))
    with pytest.raises(ToolError) as exc_info:
        strategy.run(staging_dir)
    assert exc_info.value.exit_code == 1
    staging.cleanup(staging_dir)
    assert os.listdir(staging_root) == []
