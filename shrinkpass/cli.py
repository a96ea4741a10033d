"""
Command-Line Interface (CLI) of shrinkpass.

Encoding behavior is configured in `config.user.yaml` (see `config.settings`),
not with flags. The CLI only chooses where to run, which config file to read
and how verbose the console is.
"""
import argparse
import signal
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from .config.common import LOGGER_FORMAT
from .config.settings import load_settings
from .domain.exceptions import ConfigurationException
from .pipeline.video_pipeline import ShrinkPipeline
from .utils.executables import Executables


def get_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments.

    Returns:
        argparse.Namespace: target_dir, config and log_level.
    """
    parser = argparse.ArgumentParser(
        description="Recompress videos in place to an approximate target size with a two-pass encode."
    )
    parser.add_argument(
        "--target-dir", type=str, default=None,
        help="Directory to process recursively (default: current working directory)."
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="YAML configuration file (default: config.user.yaml at the project root)."
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO", choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging level."
    )
    args = parser.parse_args(argv)

    if args.config and not Path(args.config).is_file():
        parser.error(f"The configuration file '{args.config}' does not exist.")
    return args


def _raise_system_exit(signum, frame):
    # Unwind through the running job's cleanup instead of dying mid-encode.
    raise SystemExit(128 + signum)


def main(argv: Optional[List[str]] = None) -> int:
    args = get_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=args.log_level, format=LOGGER_FORMAT)
    logger.debug(f"Parsed arguments: {args}")

    try:
        settings = load_settings(Path(args.config) if args.config else None)
    except ConfigurationException as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    executables = Executables(settings.ffmpeg_dir)
    executables.verify_ffmpeg()

    project_path = Path(args.target_dir).resolve() if args.target_dir else Path.cwd().resolve()
    logger.info(f"Target directory: {project_path}")

    signal.signal(signal.SIGTERM, _raise_system_exit)
    try:
        return ShrinkPipeline(project_path, settings, executables=executables).run()
    except (FileNotFoundError, NotADirectoryError, PermissionError) as e:
        logger.error(f"Cannot scan {project_path}: {e}")
        return 2
    except KeyboardInterrupt:
        logger.warning("Interrupted. The file in progress was left untouched.")
        return 130
