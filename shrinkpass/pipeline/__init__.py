"""
This package contains the batch pipeline of shrinkpass.

The pipeline discovers the candidate files, applies the skip policy and drives
one encoder per file, sequentially, collecting per-file outcomes.
"""
