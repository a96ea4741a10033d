"""
The two codec variants of the two-pass encode.

Both share the state machine and stream handling of `Encoder`; they differ in
the ffmpeg encoder name and in how the pass-log/statistics file is passed.
"""
from pathlib import Path
from typing import Dict, List, Optional, Type

from ..config.settings import EncodeSettings
from ..config.video import X264_ENCODER, X265_ENCODER
from ..domain.job import EncodeJob
from ..utils.executables import Executables
from .encoder_base import Encoder


class X264Encoder(Encoder):
    """libx264: plays on practically every device."""

    encoder_codec_name = X264_ENCODER

    def pass_args(self, pass_number: int, job: EncodeJob) -> List[str]:
        return ["-pass", str(pass_number), "-passlogfile", str(job.passlog_base)]


class X265Encoder(Encoder):
    """libx265: smaller files, slower encode. Optionally tagged hvc1 for Apple players."""

    encoder_codec_name = X265_ENCODER

    def pass_args(self, pass_number: int, job: EncodeJob) -> List[str]:
        return ["-x265-params", f"pass={pass_number}:stats={job.x265_stats_path}"]

    def tag_args(self) -> List[str]:
        if self.settings.hvc1_tag:
            return ["-tag:v", "hvc1"]
        return []


ENCODER_CLASSES: Dict[str, Type[Encoder]] = {
    X264_ENCODER: X264Encoder,
    X265_ENCODER: X265Encoder,
}


def create_encoder(
    input_path: Path,
    settings: EncodeSettings,
    executables: Optional[Executables] = None,
    report_dir: Optional[Path] = None,
) -> Encoder:
    """Returns the encoder for `settings.codec`."""
    return ENCODER_CLASSES[settings.codec](input_path, settings, executables=executables, report_dir=report_dir)
