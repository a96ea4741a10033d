"""
The domain layer of shrinkpass: the concepts of a recompression job,
independent of how files are found or how results are reported.

Modules:
    exceptions.py: Skip and failure types raised while processing one file.
    media.py: The probe adapter (`get_duration`, `has_audio_stream`, `MediaProbe`),
              wrapping ffprobe through ffmpeg-python.
    bitrate.py: `plan_bitrates`, the pure size-to-bitrate arithmetic.
    job.py: `EncodeJob`, which owns the temp output and pass-log files of one
            encode and guarantees the atomic commit and the cleanup.
"""
