"""
This module provides the run report files written next to the processed videos.

Console logging goes through loguru; these classes keep a persistent record:
`SuccessLog` appends one YAML entry per committed file (machine-readable),
`ErrorLog` appends one plain-text block per failed file with the ffmpeg
command and its stderr (human-readable, for debugging).
"""

from pathlib import Path
from typing import Dict, List, Union

import yaml
from loguru import logger

from ..config.common import ERROR_LOG_NAME, SUCCESS_LOG_NAME


class Log:
    """
    Base class of the report files.

    Resolves the directory of the log file and makes sure it exists.
    """

    # Separator between entries of text logs.
    linesep_marker: str = "=" * 50

    def __init__(self, log_base_path: Path):
        """
        Args:
            log_base_path: A directory to write into, or a file path whose
                           parent is used.
        """
        self.log_file_path: Path
        if log_base_path.is_dir():
            self.log_dir: Path = log_base_path.resolve()
        else:
            self.log_dir: Path = log_base_path.parent.resolve()
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def write(self, log_content: Union[dict, list, str]):
        raise NotImplementedError("Subclasses must implement the write() method.")


class ErrorLog(Log):
    """Appends human-readable error blocks to a text file."""

    def __init__(self, error_log_dir: Path, filename: str = ERROR_LOG_NAME):
        super().__init__(error_log_dir)
        self.log_file_path = self.log_dir / filename

    def write(self, *error_messages: str):
        """
        Appends the given lines as one block, followed by a separator line.

        A write failure (disk full, permissions) is reported through loguru so
        the messages are not lost.
        """
        if not error_messages:
            return

        content_to_write = "\n".join(error_messages) + "\n" + self.linesep_marker + "\n"
        try:
            with self.log_file_path.open("a", encoding="utf-8") as f:
                f.write(content_to_write)
        except OSError as e:
            logger.error(f"Failed to write to error log {self.log_file_path}: {e}")
            for msg in error_messages:
                logger.error(f"  - {msg}")


class SuccessLog(Log):
    """
    Structured YAML record of successful encodes.

    The file always holds a YAML list; each `write()` reads it back, appends the
    new entry with the next index and rewrites the whole list.
    """

    def __init__(self, success_log_dir: Path, filename: str = SUCCESS_LOG_NAME):
        super().__init__(success_log_dir)
        self.log_file_path = self.log_dir / filename
        self.log_entries: List[Dict] = []

    def _load_entries(self) -> List[Dict]:
        if not self.log_file_path.is_file():
            return []
        try:
            with self.log_file_path.open("r", encoding="utf-8") as f:
                loaded_entries = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Error reading success log {self.log_file_path}: {e}. Starting a new log.")
            return []
        if loaded_entries is None:
            return []
        if not isinstance(loaded_entries, list):
            logger.warning(f"Success log {self.log_file_path} contained unexpected data. Starting a new log.")
            return []
        return loaded_entries

    def write(self, new_log_entry: dict):
        if not isinstance(new_log_entry, dict):
            logger.error("SuccessLog.write expects a dictionary as a log entry.")
            return

        self.log_entries = self._load_entries()
        current_max_index = max(
            (entry.get("index", 0) for entry in self.log_entries if isinstance(entry, dict)),
            default=0,
        )
        self.log_entries.append({"index": current_max_index + 1, **new_log_entry})

        try:
            with self.log_file_path.open("w", encoding="utf-8") as f:
                yaml.dump(
                    self.log_entries,
                    f,
                    default_flow_style=False,
                    sort_keys=False,
                    allow_unicode=True,
                    indent=4,
                    width=220,
                )
        except OSError as e:
            logger.error(f"Failed to write to success log {self.log_file_path}: {e}")
