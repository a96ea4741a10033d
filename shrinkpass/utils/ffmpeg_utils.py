"""
This module provides the helper used to run ffmpeg and other command-line tools.
"""

import os
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional

from loguru import logger


def format_cmd(cmd_list: List[str]) -> str:
    """Returns a copy-pasteable rendering of a command list for logs."""
    if os.name == "nt":
        return subprocess.list2cmdline(cmd_list)
    return shlex.join(cmd_list)


def run_cmd(
    cmd_list: List[str],
    src_file_for_log: Path = Path(),
    show_cmd: bool = False,
) -> Optional[subprocess.CompletedProcess]:
    """
    Executes an external command and captures its output.

    This is a wrapper around `subprocess.run` that adds logging. The command is
    always passed as an argument list and never through a shell.

    If the caller is interrupted (KeyboardInterrupt, SystemExit) while waiting,
    `subprocess.run` kills the child before the exception propagates, so no
    ffmpeg process outlives its job.

    Args:
        cmd_list: The command to execute, as a list of strings.
        src_file_for_log: The source file being processed, used for log context.
        show_cmd: If True, the command is logged at DEBUG level before execution.

    Returns:
        A `subprocess.CompletedProcess` with return code, stdout and stderr, or
        `None` if the command could not be started (e.g. the executable is missing).
    """
    if not cmd_list:
        logger.error("run_cmd received an empty command list.")
        return None

    display_cmd_str = format_cmd(cmd_list)
    if show_cmd:
        logger.debug(f"Executing: {display_cmd_str}")

    try:
        result = subprocess.run(
            cmd_list,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            shell=False,
        )
    except FileNotFoundError:
        logger.error(
            f"Command not found: '{cmd_list[0]}'. Ensure it's in your system's PATH or configured in config.user.yaml."
        )
        return None
    except OSError as e:
        logger.error(f"Could not start command for {src_file_for_log.name or 'N/A'}: {e}")
        return None

    if result.stdout:
        logger.trace(f"Command stdout: {result.stdout[:500]}")
    if result.stderr and result.returncode != 0:
        logger.debug(f"Command stderr (error, rc={result.returncode}): {result.stderr}")
    elif result.stderr:
        logger.trace(f"Command stderr (non-error, rc={result.returncode}): {result.stderr}")

    return result
