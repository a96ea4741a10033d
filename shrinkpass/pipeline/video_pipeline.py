from collections import Counter
from pathlib import Path
from typing import List, Optional

from loguru import logger

from ..config.settings import EncodeSettings
from ..domain.exceptions import EncodingException, SkippedFileException
from ..services.encoder_base import matches_skip_policy
from ..services.file_processing_service import ProcessVideoFiles
from ..services.video_encoder import create_encoder
from ..utils.executables import Executables

OUTCOME_DONE = "done"
OUTCOME_SKIPPED = "skipped"
OUTCOME_FAILED = "failed"


class ShrinkPipeline:
    """
    Recompresses every candidate under `project_dir`, one file at a time.

    A skip or a failure only ends that file's job; the batch always moves on to
    the next candidate. `run()` returns the process exit code.
    """

    def __init__(
        self,
        project_dir: Path,
        settings: EncodeSettings,
        executables: Optional[Executables] = None,
    ):
        self.project_dir: Path = project_dir.resolve()
        self.settings = settings
        self.executables = executables or Executables(settings.ffmpeg_dir)
        self.report_dir: Optional[Path] = self.project_dir if settings.write_reports else None
        self.outcomes: Counter = Counter()
        self.failed_files: List[Path] = []

    def process_single_file(self, path: Path) -> str:
        if matches_skip_policy(path, self.settings.skip_prefix):
            logger.info(f"skip (name starts with {self.settings.skip_prefix}): {path}")
            return OUTCOME_SKIPPED

        encoder = create_encoder(path, self.settings, executables=self.executables, report_dir=self.report_dir)
        try:
            encoder.start()
        except SkippedFileException as e:
            logger.warning(f"skip ({e}): {path}")
            return OUTCOME_SKIPPED
        except EncodingException:
            # Already logged and reported by the encoder.
            self.failed_files.append(path)
            return OUTCOME_FAILED
        except OSError as e:
            logger.error(f"failed: {path} | {e}")
            self.failed_files.append(path)
            return OUTCOME_FAILED
        except Exception as e:
            logger.exception(f"failed: {path} | unexpected error: {e}")
            self.failed_files.append(path)
            return OUTCOME_FAILED
        return OUTCOME_DONE

    def process_multi_file(self):
        """
        Raises:
            FileNotFoundError, NotADirectoryError: If the target directory is unusable.
        """
        files = ProcessVideoFiles(self.project_dir, self.settings).files
        if not files:
            logger.info(f"No matching files under {self.project_dir}")
            return

        logger.info(f"Processing {len(files)} file(s) under {self.project_dir} with {self.settings.codec}")
        for i, path in enumerate(files, start=1):
            logger.debug(f"[{i}/{len(files)}] {path}")
            self.outcomes[self.process_single_file(path)] += 1

    def run(self) -> int:
        self.process_multi_file()
        logger.success(
            f"All done. {self.outcomes[OUTCOME_DONE]} done, "
            f"{self.outcomes[OUTCOME_SKIPPED]} skipped, {self.outcomes[OUTCOME_FAILED]} failed."
        )
        for path in self.failed_files:
            logger.error(f"  failed: {path}")
        return 1 if self.failed_files else 0
