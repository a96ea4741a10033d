import math
import os
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from ..config.settings import EncodeSettings
from ..config.video import AUDIO_ENCODER, DURATION_EPSILON, PIXEL_FORMAT
from ..domain.bitrate import BitratePlan, plan_bitrates
from ..domain.exceptions import (
    EncodePassFailedException,
    EncodingException,
    InvalidDurationException,
    SkippedByPolicyException,
    UnreadableMediaException,
)
from ..domain.job import EncodeJob
from ..domain.media import MediaProbe
from ..utils.executables import Executables
from ..utils.ffmpeg_utils import format_cmd, run_cmd
from ..utils.format_utils import format_timedelta, formatted_size
from .logging_service import ErrorLog, SuccessLog


def matches_skip_policy(path: Path, skip_prefix: str) -> bool:
    """True if the base name starts with `skip_prefix`. An empty prefix never matches."""
    return bool(skip_prefix) and path.name.startswith(skip_prefix)


class Encoder:
    """
    Two-pass, in-place recompression of one file.

    `start()` walks the job through
    PROBE -> VALIDATE -> PLAN -> PASS 1 -> PASS 2 -> COMMIT, with the
    `EncodeJob` context guaranteeing CLEANUP on every exit path.
    Subclasses only supply the codec-specific pass parameters.

    Skips raise a `SkippedFileException` subclass before anything is written.
    Failures raise an `EncodingException` subclass after the original has been
    left untouched and the transient files removed.
    """

    encoder_codec_name: str = ""
    encode_start_datetime: datetime
    encode_end_datetime: datetime
    encode_time: timedelta

    def __init__(
        self,
        input_path: Path,
        settings: EncodeSettings,
        executables: Optional[Executables] = None,
        report_dir: Optional[Path] = None,
    ):
        self.input_path: Path = input_path.resolve()
        self.settings = settings
        self.executables = executables or Executables(settings.ffmpeg_dir)
        self.report_dir = report_dir

        self.media_probe: Optional[MediaProbe] = None
        self.plan: Optional[BitratePlan] = None
        self.job: Optional[EncodeJob] = None
        self.original_size: int = 0
        self.encoded_size: int = 0
        self.encode_cmd_list: List[str] = []

    # --- state machine ---

    def start(self):
        """
        Processes the file.

        Raises:
            SkippedFileException: The file was left alone on purpose.
            EncodingException: A pass or the commit failed; the original is unchanged.
        """
        if matches_skip_policy(self.input_path, self.settings.skip_prefix):
            raise SkippedByPolicyException(f"name starts with '{self.settings.skip_prefix}'")

        self.media_probe = MediaProbe.from_path(self.input_path, self.executables.ffprobe)
        self.validate()
        self.plan = self.make_plan()
        self.original_size = self.input_path.stat().st_size

        logger.info(
            f"==> in-place: {self.input_path} | dur={self.media_probe.duration:.2f}s "
            f"target={self.settings.target_size_mb}MB total≈{self.plan.total_kbps}k "
            f"video={self.plan.video_kbps}k audio={self.plan.audio_kbps}k enc={self.encoder_codec_name}"
        )

        self.encode_start_datetime = datetime.now()
        try:
            with EncodeJob(self.input_path, self.plan, self.settings) as job:
                self.job = job
                self._run_pass(1, self.build_pass1_cmd(job))
                self._run_pass(2, self.build_pass2_cmd(job))
                job.commit()
        except EncodingException as e:
            self.failed_action(e)
            raise

        self.encode_end_datetime = datetime.now()
        self.encode_time = self.encode_end_datetime - self.encode_start_datetime
        self.encoded_size = self.input_path.stat().st_size
        logger.success(
            f"done: {self.input_path} | {formatted_size(self.original_size)} -> "
            f"{formatted_size(self.encoded_size)} in {format_timedelta(self.encode_time)}"
        )
        self.write_success_log()

    def validate(self):
        duration = self.media_probe.duration
        if not math.isfinite(duration) or duration <= 0:
            raise UnreadableMediaException("no readable duration")
        if duration <= DURATION_EPSILON:
            raise InvalidDurationException(f"bad duration (dur={duration})")

    def make_plan(self) -> BitratePlan:
        audio_kbps = self.settings.audio_bitrate_kbps if self.media_probe.has_audio else 0
        plan = plan_bitrates(
            self.settings.target_size_mb,
            self.media_probe.duration,
            audio_kbps,
            self.settings.min_video_bitrate_kbps,
        )
        if plan.is_degenerate:
            raise InvalidDurationException(f"cannot plan bitrates (dur={self.media_probe.duration})")
        return plan

    def _run_pass(self, pass_number: int, cmd: List[str]):
        self.encode_cmd_list = cmd
        logger.debug(f"Pass {pass_number} for {self.input_path.name}")
        result = run_cmd(cmd, src_file_for_log=self.input_path, show_cmd=True)
        if result is None:
            raise EncodePassFailedException(pass_number, -1, "ffmpeg could not be started")
        if result.returncode != 0:
            raise EncodePassFailedException(pass_number, result.returncode, result.stderr or "")

    # --- command building ---

    @property
    def include_audio(self) -> bool:
        return bool(self.media_probe and self.media_probe.has_audio and self.plan and self.plan.audio_kbps > 0)

    def video_filter(self) -> str:
        # Clamp width keeping aspect ratio; -2 forces an even height.
        return f"scale='min(iw,{self.settings.max_width})':-2,fps={self.settings.fps},format={PIXEL_FORMAT}"

    def _input_args(self) -> List[str]:
        return [
            self.executables.ffmpeg,
            "-nostdin",
            "-y",
            "-hide_banner",
            "-loglevel",
            "error",
            "-i",
            str(self.input_path),
        ]

    def _video_args(self) -> List[str]:
        return [
            "-vf",
            self.video_filter(),
            "-c:v",
            self.encoder_codec_name,
            "-b:v",
            f"{self.plan.video_kbps}k",
            "-preset",
            self.settings.preset,
        ]

    def _audio_args(self) -> List[str]:
        if self.include_audio:
            return ["-c:a", AUDIO_ENCODER, "-b:a", f"{self.plan.audio_kbps}k"]
        return ["-an"]

    def pass_args(self, pass_number: int, job: EncodeJob) -> List[str]:
        raise NotImplementedError("Subclasses must implement pass_args().")

    def tag_args(self) -> List[str]:
        return []

    def build_pass1_cmd(self, job: EncodeJob) -> List[str]:
        """Analysis pass: video only, statistics to the job's pass-log, output discarded."""
        return (
            self._input_args()
            + ["-map", "0:v:0"]
            + self._video_args()
            + self.pass_args(1, job)
            + ["-an", "-f", "null", os.devnull]
        )

    def build_pass2_cmd(self, job: EncodeJob) -> List[str]:
        """Final pass into the job's temp output, with faststart for progressive download."""
        stream_maps = ["-map", "0:v:0"]
        if self.include_audio:
            stream_maps += ["-map", "0:a:0"]
        return (
            self._input_args()
            + stream_maps
            + self._video_args()
            + self.pass_args(2, job)
            + self.tag_args()
            + self._audio_args()
            + ["-movflags", "+faststart", str(job.temp_output_path)]
        )

    # --- reporting ---

    def failed_action(self, error: EncodingException):
        logger.error(f"failed: {self.input_path} | {error}")
        if self.report_dir is None:
            return
        lines = [
            f"Original file: {self.input_path}",
            f"Encoder: {self.encoder_codec_name}",
            f"Error: {error}",
        ]
        if isinstance(error, EncodePassFailedException):
            lines.append(f"Failed command: {format_cmd(self.encode_cmd_list)}")
            lines.append(f"Stderr: {error.stderr.strip()}")
        ErrorLog(self.report_dir).write(*lines)

    def success_log_entry(self) -> Dict[str, Any]:
        return {
            "file": str(self.input_path),
            "encoder": self.encoder_codec_name,
            "duration_seconds": round(self.media_probe.duration, 3),
            "has_audio": self.media_probe.has_audio,
            "total_kbps": self.plan.total_kbps,
            "video_kbps": self.plan.video_kbps,
            "audio_kbps": self.plan.audio_kbps,
            "original_size": formatted_size(self.original_size),
            "encoded_size": formatted_size(self.encoded_size),
            "encode_time": format_timedelta(self.encode_time),
            "ended_datetime": self.encode_end_datetime.isoformat(timespec="seconds"),
        }

    def write_success_log(self):
        if self.report_dir is None:
            return
        SuccessLog(self.report_dir).write(self.success_log_entry())
