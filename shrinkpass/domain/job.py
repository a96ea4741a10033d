"""
Defines `EncodeJob`, the owner of every transient file one encode creates.

A job names its temp output and its pass-log files uniquely (hash of the
absolute input path, process id, a per-process counter and a random token),
replaces the original only through one atomic rename, and deletes whatever is
left over when it ends. Use it as a context manager so the cleanup also runs
when an encode fails or the process is interrupted:

    with EncodeJob(path, plan, settings) as job:
        ...run both passes into job.temp_output_path...
        job.commit()
"""

import hashlib
import itertools
import os
import random
import string
from pathlib import Path
from typing import List, Optional, Tuple

from loguru import logger

from ..config.common import RANDOM_TOKEN_LENGTH
from ..config.settings import EncodeSettings
from ..config.video import OUTPUT_SUFFIX, PASSLOG_PREFIX
from .bitrate import BitratePlan
from .exceptions import CommitFailedException

# Files libx264 (via -passlogfile) and libx265 (via stats=) may leave behind,
# as suffixes of the job's pass-log base path.
X264_PASSLOG_SUFFIXES: Tuple[str, ...] = ("", "-0.log", "-0.log.mbtree", "-0.log.temp", "-0.log.mbtree.temp", ".log", ".log.mbtree")
X265_STATS_SUFFIX = ".x265.log"
X265_PASSLOG_SUFFIXES: Tuple[str, ...] = (
    X265_STATS_SUFFIX,
    f"{X265_STATS_SUFFIX}.cutree",
    f"{X265_STATS_SUFFIX}.temp",
    f"{X265_STATS_SUFFIX}.cutree.temp",
)

_job_counter = itertools.count(1)


def input_path_hash(path: Path) -> str:
    """MD5 of the absolute input path; identifies the file, not its content."""
    return hashlib.md5(str(path.resolve()).encode("utf-8")).hexdigest()


def generate_random_string(length: int = RANDOM_TOKEN_LENGTH) -> str:
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


def make_job_id(path: Path) -> str:
    return f"{input_path_hash(path)[:16]}.{os.getpid()}.{next(_job_counter)}.{generate_random_string()}"


def is_temp_output_name(name: str) -> bool:
    """True for file names shaped like an `EncodeJob` temp output."""
    return name.startswith(".") and ".tmp." in name and name.lower().endswith(OUTPUT_SUFFIX)


class EncodeJob:
    """
    Per-file encode scope.

    Attributes:
        input_path (Path): Absolute path of the file being recompressed.
        plan (BitratePlan): The bitrates the encode will use.
        settings (EncodeSettings): The run's settings; only codec and passlog_dir matter here.
        job_id (str): Unique identifier embedded in every artifact name.
        temp_output_path (Path): Hidden file next to the input receiving pass 2.
        passlog_base (Path): Base path of the pass-log/statistics files.
        committed (bool): True once the temp output replaced the original.
    """

    def __init__(self, input_path: Path, plan: BitratePlan, settings: EncodeSettings):
        self.input_path: Path = input_path.resolve()
        self.plan = plan
        self.settings = settings
        self.job_id = make_job_id(self.input_path)

        # Same directory as the input so that commit() is a rename, never a copy.
        self.temp_output_path: Path = self.input_path.parent / (
            f".{self.input_path.stem}.tmp.{self.job_id}{OUTPUT_SUFFIX}"
        )
        self.passlog_base: Path = settings.passlog_dir / f"{PASSLOG_PREFIX}{self.job_id}"
        self.committed = False
        self._cleaned_up = False

    @property
    def x265_stats_path(self) -> Path:
        return Path(f"{self.passlog_base}{X265_STATS_SUFFIX}")

    def artifact_paths(self) -> List[Path]:
        """Every path this job may create besides the committed output, for both codec variants."""
        artifacts = [self.temp_output_path]
        for suffix in X264_PASSLOG_SUFFIXES + X265_PASSLOG_SUFFIXES:
            artifacts.append(Path(f"{self.passlog_base}{suffix}"))
        return artifacts

    def commit(self):
        """
        Atomically replaces the original with the finished temp output.

        Raises:
            CommitFailedException: If the rename fails. The original is untouched.
        """
        if not self.temp_output_path.is_file():
            raise CommitFailedException(
                self.input_path, self.temp_output_path, FileNotFoundError("temp output missing")
            )
        try:
            os.replace(self.temp_output_path, self.input_path)
        except OSError as e:
            raise CommitFailedException(self.input_path, self.temp_output_path, e) from e
        self.committed = True
        logger.debug(f"Replaced {self.input_path} with {self.temp_output_path.name}")

    def cleanup(self):
        """
        Deletes the temp output (if still there) and all pass-log artifacts.

        Runs once; later calls are no-ops. Missing files are expected. A file
        that cannot be removed is logged and left behind, never raised.
        """
        if self._cleaned_up:
            return
        self._cleaned_up = True
        for artifact in self.artifact_paths():
            try:
                artifact.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove {artifact}: {e}")

    def __enter__(self) -> "EncodeJob":
        self.settings.passlog_dir.mkdir(parents=True, exist_ok=True)
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> Optional[bool]:
        self.cleanup()
        return None

    def __repr__(self):
        return f"EncodeJob({self.input_path.name!r}, id={self.job_id!r})"
