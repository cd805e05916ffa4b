"""
Shared Conversion Contracts
Fixed filenames and the frame naming pattern agreed on by the frame extractor
and every conversion strategy
"""

# Name the uploaded payload is staged under inside every staging directory
INPUT_FILENAME = 'in.gif'

# printf-style pattern understood by both ImageMagick and ffmpeg
FRAME_PATTERN = 'frame_%05d.png'
FRAME_GLOB = 'frame_*.png'
FIRST_FRAME_INDEX = 1

MP4_OUTPUT_FILENAME = 'out.mp4'
OGV_OUTPUT_FILENAME = 'out.ogv'

# Truncates each dimension to the nearest even value (yuv420p rejects odd sizes)
EVEN_DIMENSION_FILTER = 'scale=trunc(in_w/2)*2:trunc(in_h/2)*2'

# Strategy names
DIRECT_MP4 = 'direct-mp4'
FRAMES_MP4 = 'frames-mp4'
FRAMES_OGV = 'frames-ogv'
FIRST_FRAME = 'first-frame'

STRATEGY_NAMES = (DIRECT_MP4, FRAMES_MP4, FRAMES_OGV, FIRST_FRAME)


def frame_filename(index: int) -> str:
    """Filename of the frame with the given 1-based index"""
    if index < FIRST_FRAME_INDEX:
        raise ValueError(f"Frame index must be >= {FIRST_FRAME_INDEX}, got {index}")
    return FRAME_PATTERN % index


def first_frame_filename() -> str:
    return frame_filename(FIRST_FRAME_INDEX)
