"""
This module provides the Executables class to locate and verify the external
tools required by the application: ffmpeg and ffprobe.
"""
import subprocess
import sys
from pathlib import Path
from typing import Optional

from loguru import logger


class Executables:
    """
    Resolves the ffmpeg/ffprobe commands to use.

    A configured `ffmpeg_dir` (from `config.user.yaml`) takes priority; when it
    is not set or does not contain the executable, the bare command name is
    used and the system PATH decides.
    """

    def __init__(self, ffmpeg_dir: Optional[Path] = None):
        self.ffmpeg_dir = ffmpeg_dir

    def _resolve(self, tool: str) -> str:
        exe_name = f"{tool}.exe" if sys.platform == "win32" else tool
        if self.ffmpeg_dir and self.ffmpeg_dir.is_dir():
            configured_path = self.ffmpeg_dir / exe_name
            if configured_path.is_file():
                return str(configured_path)
            logger.warning(
                f"`ffmpeg_dir` is configured, but '{exe_name}' was not found there. Falling back to system PATH."
            )
        return tool

    @property
    def ffmpeg(self) -> str:
        return self._resolve("ffmpeg")

    @property
    def ffprobe(self) -> str:
        return self._resolve("ffprobe")

    def verify_ffmpeg(self) -> bool:
        """
        Runs `ffmpeg -version` and logs the outcome.

        Returns:
            True if ffmpeg could be executed, False otherwise. A failure is only
            logged here; each encode will report its own error.
        """
        ffmpeg_cmd = self.ffmpeg
        try:
            result = subprocess.run(
                [ffmpeg_cmd, "-version"],
                check=True,
                capture_output=True,
                text=True,
                encoding="utf-8",
            )
        except subprocess.CalledProcessError as e:
            logger.error(f"FFmpeg version command failed (return code {e.returncode}):\n{e.stderr}")
            return False
        except FileNotFoundError:
            logger.error(
                "FFmpeg command not found. Please ensure FFmpeg is installed and accessible.\n"
                "You can either add it to your system's PATH or set 'paths.ffmpeg_dir' in 'config.user.yaml'."
            )
            return False
        version_lines = result.stdout.splitlines()
        logger.info(f"FFmpeg version check successful: {version_lines[0] if version_lines else 'unknown'}")
        return True
