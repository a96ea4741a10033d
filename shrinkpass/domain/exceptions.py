"""
Defines custom exception types for shrinkpass.

Each stage of a file's job raises its own exception type so the batch driver
can tell a harmless skip from a real failure without inspecting messages.
Skips and failures never cross file boundaries: the pipeline catches them per
file and moves on.

All custom exceptions inherit from the base `ShrinkPassException`.
"""
from pathlib import Path
from typing import Optional


class ShrinkPassException(Exception):
    """Base class for all custom exceptions in shrinkpass."""

    pass


class ConfigurationException(ShrinkPassException):
    """Raised when the user configuration holds an invalid value."""

    pass


# --- Skips ---
class SkippedFileException(ShrinkPassException):
    """
    Raised when a file is intentionally left alone.

    This is not an error but a control flow mechanism: the original file is
    untouched and the batch continues with the next candidate.
    """

    pass


class SkippedByPolicyException(SkippedFileException):
    """Raised when the file name starts with the configured skip prefix."""

    pass


class UnreadableMediaException(SkippedFileException):
    """
    Raised when ffprobe cannot open the file or report a duration.

    Treated as a skip: a corrupt or non-media file should not stop the batch.
    """

    pass


class InvalidDurationException(SkippedFileException):
    """Raised when the duration is too small to plan a bitrate for."""

    pass


# --- Encoding ---
class EncodingException(ShrinkPassException):
    """Base class for failures after the encode has started."""

    pass


class EncodePassFailedException(EncodingException):
    """
    Raised when one of the two ffmpeg passes exits nonzero.

    A return code of -1 means ffmpeg could not be started at all.
    """

    def __init__(self, pass_number: int, return_code: int, stderr: str = ""):
        self.pass_number = pass_number
        self.return_code = return_code
        self.stderr = stderr
        super().__init__(f"ffmpeg pass {pass_number} failed (rc={return_code})")


class CommitFailedException(EncodingException):
    """
    Raised when the finished temp output cannot replace the original.

    The rename is atomic, so the original is still in its pre-encode state.
    """

    def __init__(self, original: Path, temp_output: Path, reason: Optional[OSError] = None):
        self.original = original
        self.temp_output = temp_output
        self.reason = reason
        super().__init__(f"Could not replace {original} with {temp_output}: {reason}")
