"""
Utilities Package for shrinkpass.

Helpers that are not specific to any single part of the encoding domain.

Modules:
    - ffmpeg_utils.py: Runs external commands such as ffmpeg.
    - executables.py: Locates and verifies the ffmpeg/ffprobe executables.
    - format_utils.py: Formats durations and file sizes for logs and reports.
"""
