"""
Default encode settings.

Every value here can be overridden from the `encode` section of
`config.user.yaml`; see `config.settings.EncodeSettings`.
"""
import tempfile
from pathlib import Path

# --- Size Target ---
TARGET_SIZE_MB = 2  # approximate output size per video
AUDIO_BITRATE_KBPS = 128  # used only when the input has an audio stream
MIN_VIDEO_BITRATE_KBPS = 180  # floor; wins over the size target for short budgets

# 1 MB = 1024 * 8 kbit
KBITS_PER_MB = 8192

# Durations at or below this are treated as unreadable/corrupt.
DURATION_EPSILON = 0.05

# --- Encoder Settings ---
X264_ENCODER = "libx264"  # broad device compatibility
X265_ENCODER = "libx265"  # smaller output, slower
SUPPORTED_ENCODERS = (X264_ENCODER, X265_ENCODER)
VIDEO_ENCODER = X264_ENCODER
AUDIO_ENCODER = "aac"
PRESET = "slow"
USE_HVC1_TAG = False  # libx265 only; needed by Apple players

# --- Quality Helpers ---
MAX_WIDTH = 1920
FPS = 30
PIXEL_FORMAT = "yuv420p"

# --- File Selection ---
SKIP_PREFIX = "2x"  # "" disables the skip rule
VIDEO_EXTENSIONS = (".mp4",)
OUTPUT_SUFFIX = ".mp4"

# Pass-log / statistics files are written here, never next to the video.
PASSLOG_DIR = Path(tempfile.gettempdir())
PASSLOG_PREFIX = "ffpass_"
