"""
The immutable settings object passed from the entry point down to every encode job.
"""
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from loguru import logger

from . import video
from .common import USER_CONFIG_PATH, load_user_config
from ..domain.exceptions import ConfigurationException


@dataclass(frozen=True)
class EncodeSettings:
    """
    All knobs of a shrinkpass run.

    Built once by `load_settings()` and never mutated afterwards, so a single
    instance can be shared by the pipeline, the file scanner and every encoder.
    """

    target_size_mb: float = video.TARGET_SIZE_MB
    audio_bitrate_kbps: int = video.AUDIO_BITRATE_KBPS
    min_video_bitrate_kbps: int = video.MIN_VIDEO_BITRATE_KBPS
    preset: str = video.PRESET
    codec: str = video.VIDEO_ENCODER
    hvc1_tag: bool = video.USE_HVC1_TAG
    max_width: int = video.MAX_WIDTH
    fps: int = video.FPS
    skip_prefix: str = video.SKIP_PREFIX
    video_extensions: Tuple[str, ...] = video.VIDEO_EXTENSIONS
    passlog_dir: Path = video.PASSLOG_DIR
    ffmpeg_dir: Optional[Path] = None
    write_reports: bool = True

    def __post_init__(self):
        if self.codec not in video.SUPPORTED_ENCODERS:
            raise ConfigurationException(
                f"Unsupported codec '{self.codec}'. Choose one of {', '.join(video.SUPPORTED_ENCODERS)}."
            )
        for name in ("target_size_mb", "max_width", "fps"):
            if getattr(self, name) <= 0:
                raise ConfigurationException(f"'{name}' must be positive, got {getattr(self, name)}.")
        for name in ("audio_bitrate_kbps", "min_video_bitrate_kbps"):
            if getattr(self, name) < 0:
                raise ConfigurationException(f"'{name}' cannot be negative, got {getattr(self, name)}.")
        if not self.preset:
            raise ConfigurationException("'preset' cannot be empty.")
        # Normalize extensions to lowercase with a leading dot.
        normalized = tuple(
            ext.lower() if ext.startswith(".") else f".{ext.lower()}"
            for ext in self.video_extensions
        )
        object.__setattr__(self, "video_extensions", normalized)
        object.__setattr__(self, "passlog_dir", Path(self.passlog_dir))
        if self.ffmpeg_dir is not None:
            object.__setattr__(self, "ffmpeg_dir", Path(self.ffmpeg_dir))

    @property
    def uses_x265(self) -> bool:
        return self.codec == video.X265_ENCODER


_ENCODE_KEYS = {f.name for f in fields(EncodeSettings)} - {"ffmpeg_dir"}


def settings_from_dict(user_config: Dict[str, Any]) -> EncodeSettings:
    """
    Builds `EncodeSettings` from a parsed user config mapping.

    The 'encode' section overrides the defaults key by key; 'paths.ffmpeg_dir'
    locates the ffmpeg/ffprobe executables. Unknown keys are reported and ignored.

    Raises:
        ConfigurationException: If a section has the wrong shape or a value is invalid.
    """
    encode_section = user_config.get("encode") or {}
    paths_section = user_config.get("paths") or {}
    if not isinstance(encode_section, dict) or not isinstance(paths_section, dict):
        raise ConfigurationException("'encode' and 'paths' must be mappings in the user config.")

    overrides: Dict[str, Any] = {}
    for key, value in encode_section.items():
        if key not in _ENCODE_KEYS:
            logger.warning(f"Unknown encode setting '{key}' ignored.")
            continue
        overrides[key] = value

    if "video_extensions" in overrides:
        extensions = overrides["video_extensions"]
        overrides["video_extensions"] = (extensions,) if isinstance(extensions, str) else tuple(extensions)
    if overrides.get("skip_prefix") is None and "skip_prefix" in overrides:
        overrides["skip_prefix"] = ""

    ffmpeg_dir = paths_section.get("ffmpeg_dir")
    if ffmpeg_dir:
        overrides["ffmpeg_dir"] = Path(ffmpeg_dir)

    try:
        return EncodeSettings(**overrides)
    except TypeError as e:
        raise ConfigurationException(f"Invalid encode settings: {e}") from e


def load_settings(config_path: Optional[Path] = None) -> EncodeSettings:
    """Loads settings from `config_path`, or from the project's `config.user.yaml`."""
    path = config_path if config_path is not None else USER_CONFIG_PATH
    settings = settings_from_dict(load_user_config(path))
    logger.debug(f"Effective settings: {settings}")
    return settings
