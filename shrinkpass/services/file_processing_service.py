"""
Provides the discovery of the files a run will recompress.

The scan is recursive under the target directory and matches on extension.
Leftover temp outputs from an interrupted run (hidden `.<stem>.tmp.<id>.mp4`
files) are never picked up as candidates, and neither are symlinks.
"""

from pathlib import Path
from typing import Tuple

from loguru import logger

from ..config.settings import EncodeSettings
from ..domain.job import is_temp_output_name


class ProcessFiles:
    """
    Base class for discovering files to process under a source directory.

    Attributes:
        source_dir (Path): The root directory of the scan.
        files (Tuple[Path, ...]): The discovered candidates, sorted.
        settings (EncodeSettings): The run's settings.
    """

    files: Tuple[Path, ...] = tuple()

    def __init__(self, path: Path, settings: EncodeSettings):
        """
        Args:
            path: The directory to scan.
            settings: The run's settings.

        Raises:
            FileNotFoundError: If `path` does not exist.
            NotADirectoryError: If `path` is not a directory.
        """
        self.settings = settings
        self.source_dir = self._get_source_directory(path)
        self.set_files_to_process()

    @staticmethod
    def _get_source_directory(input_path: Path) -> Path:
        resolved_path = input_path.resolve()
        if not resolved_path.exists():
            raise FileNotFoundError(f"Input path does not exist: {resolved_path}")
        if not resolved_path.is_dir():
            raise NotADirectoryError(f"Input path is not a directory: {resolved_path}")
        return resolved_path

    def is_candidate(self, path: Path) -> bool:
        raise NotImplementedError("Subclasses must implement is_candidate().")

    def is_regular_file_in_tree(self, path: Path) -> bool:
        """Regular files only; symlinks and anything resolving outside `source_dir` are never touched."""
        if path.is_symlink() or not path.is_file():
            return False
        return path.resolve().is_relative_to(self.source_dir)

    def set_files_to_process(self):
        self.files = tuple(
            sorted(p for p in self.source_dir.rglob("*") if self.is_regular_file_in_tree(p) and self.is_candidate(p))
        )
        logger.debug(f"Found {len(self.files)} candidate file(s) under {self.source_dir}")


class ProcessVideoFiles(ProcessFiles):
    """Finds video files by extension (case-insensitive)."""

    def is_candidate(self, path: Path) -> bool:
        if path.suffix.lower() not in self.settings.video_extensions:
            return False
        if is_temp_output_name(path.name):
            logger.debug(f"Ignoring leftover temp output: {path}")
            return False
        return True
