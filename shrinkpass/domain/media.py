"""
The probe adapter: duration and audio presence of a media file, via ffprobe.

Probing goes through `ffmpeg.probe` from the ffmpeg-python library. A file
ffprobe cannot open is not an error at this level: it is reported as having
zero duration and no audio, and the encoder turns that into a skip.
"""
import math
import re
from dataclasses import dataclass
from pathlib import Path
from pprint import pformat
from typing import Optional

import ffmpeg
from loguru import logger


def parse_duration(duration_str: str) -> float:
    """
    Parses a duration string into total seconds.

    Handles the two formats ffprobe produces:
    1. Plain seconds as a float string (e.g., "3600.5").
    2. A timecode 'HH:MM:SS.sss' (e.g., "01:00:00.500"); hours are optional.

    Returns:
        The duration in seconds, or 0.0 if the string cannot be parsed.
    """
    try:
        value = float(duration_str)
    except ValueError:
        match = re.fullmatch(r"(?:(\d{1,2}):)?(\d{1,2}):(\d{1,2}(?:\.\d+)?)", duration_str.strip())
        if match:
            hours_str, minutes_str, seconds_str = match.groups()
            hours = int(hours_str) if hours_str else 0
            return float(hours * 3600 + int(minutes_str) * 60 + float(seconds_str))
        logger.warning(f"Could not parse duration string: {duration_str}")
        return 0.0
    # nan and inf parse as floats but are no usable duration.
    if not math.isfinite(value):
        logger.warning(f"Non-finite duration: {duration_str}")
        return 0.0
    return value


def _probe(path: Path, ffprobe_cmd: str, **kwargs) -> Optional[dict]:
    """Runs ffprobe, returning None instead of raising when the file cannot be read."""
    try:
        probe = ffmpeg.probe(str(path), cmd=ffprobe_cmd, **kwargs)
    except ffmpeg.Error as e:
        stderr = e.stderr.decode("utf-8", errors="replace") if isinstance(e.stderr, bytes) else e.stderr
        logger.warning(f"ffprobe could not read {path}: {(stderr or '').strip()}")
        return None
    except FileNotFoundError:
        logger.error(f"'{ffprobe_cmd}' not found. Ensure ffprobe is installed or set 'paths.ffmpeg_dir'.")
        return None
    except ValueError as e:
        # ffmpeg-python raises this when ffprobe prints something that isn't JSON.
        logger.warning(f"Unexpected ffprobe output for {path}: {e}")
        return None
    logger.trace(f"Probe data for {path.name}:\n{pformat(probe)}")
    return probe


def get_duration(path: Path, ffprobe_cmd: str = "ffprobe") -> float:
    """
    Returns the container duration of `path` in seconds.

    `format.duration` is preferred; the first stream carrying a duration is
    the fallback. Returns 0.0 when the duration is unavailable or unparsable,
    so callers must validate the value.
    """
    probe = _probe(path, ffprobe_cmd)
    if not probe:
        return 0.0

    duration_val = probe.get("format", {}).get("duration")
    if duration_val is None:
        duration_val = next(
            (s["duration"] for s in probe.get("streams", []) if s.get("duration") not in (None, "N/A")),
            None,
        )
    if duration_val is None:
        logger.debug(f"No duration reported for {path.name}")
        return 0.0
    return max(parse_duration(str(duration_val)), 0.0)


def has_audio_stream(path: Path, ffprobe_cmd: str = "ffprobe") -> bool:
    """True iff ffprobe finds an audio stream at audio index 0 (`-select_streams a:0`)."""
    probe = _probe(path, ffprobe_cmd, select_streams="a:0")
    if not probe:
        return False
    return any(stream.get("codec_type") == "audio" for stream in probe.get("streams", []))


@dataclass(frozen=True)
class MediaProbe:
    """What the encoder needs to know about an input file."""

    duration: float
    has_audio: bool

    @classmethod
    def from_path(cls, path: Path, ffprobe_cmd: str = "ffprobe") -> "MediaProbe":
        probe = cls(
            duration=get_duration(path, ffprobe_cmd),
            has_audio=has_audio_stream(path, ffprobe_cmd),
        )
        logger.debug(f"{path.name}: duration={probe.duration}s audio={probe.has_audio}")
        return probe
