"""
Bitrate planning: how many kbps the video may use so the output lands near the target size.
"""
from dataclasses import dataclass

from ..config.video import KBITS_PER_MB


@dataclass(frozen=True)
class BitratePlan:
    """
    Bitrates in kbps for one encode.

    `total_kbps` is informational only. When the video floor kicks in,
    `video_kbps + audio_kbps` exceeds it and the output overshoots the
    target size.
    """

    total_kbps: int
    video_kbps: int
    audio_kbps: int

    @property
    def is_degenerate(self) -> bool:
        """True for the plan returned when the duration was unusable."""
        return self.total_kbps == 0 and self.video_kbps == 0


def _round_kbps(value: float) -> int:
    # Half-up, not banker's rounding: 272.5 -> 273.
    return int(value + 0.5)


def plan_bitrates(
    target_size_mb: float,
    duration_seconds: float,
    audio_kbps: int,
    min_video_kbps: int,
) -> BitratePlan:
    """
    Splits the size budget of a clip between video and audio.

    total = target_size_mb * 8192 / duration_seconds
    video = max(total - audio_kbps, min_video_kbps)

    Args:
        target_size_mb: Desired output size in MB (1 MB = 8192 kbit).
        duration_seconds: Clip duration. A value <= 0 yields a degenerate plan.
        audio_kbps: Audio bitrate; 0 when the input has no audio.
        min_video_kbps: Video bitrate floor, which overrides the size target.

    Returns:
        The rounded plan. For `duration_seconds <= 0` this is
        `BitratePlan(0, 0, audio_kbps)`, which callers must treat as
        "cannot proceed".
    """
    if duration_seconds <= 0:
        return BitratePlan(total_kbps=0, video_kbps=0, audio_kbps=_round_kbps(audio_kbps))

    total = target_size_mb * KBITS_PER_MB / duration_seconds
    video = total - audio_kbps
    if video < min_video_kbps:
        video = min_video_kbps

    return BitratePlan(
        total_kbps=_round_kbps(total),
        video_kbps=_round_kbps(video),
        audio_kbps=_round_kbps(audio_kbps),
    )
