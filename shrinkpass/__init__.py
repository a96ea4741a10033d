"""
shrinkpass: recompress videos in place to an approximate target size with a
two-pass ffmpeg encode.
"""

__version__ = "1.0.0"
