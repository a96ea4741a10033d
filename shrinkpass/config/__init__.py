"""
Configuration Package for shrinkpass.

This package centralizes the static configuration of the application. The
encode defaults live as plain constants, and a user may override them from a
`config.user.yaml` file without touching the code.

This package includes settings for:
- Logging format and the location of the optional user configuration file.
- User-overridable paths for external tools like FFmpeg.
- Encode defaults: target size, audio bitrate, video bitrate floor, codec,
  preset, scaling, frame rate and the skip-name prefix.
- The immutable `EncodeSettings` object threaded through the pipeline.
"""
