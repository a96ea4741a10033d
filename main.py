"""
Main entry point for shrinkpass.

Run from the directory holding the videos (or pass --target-dir): every
matching file is recompressed in place to roughly the configured size.
"""

import sys

from shrinkpass.cli import main

if __name__ == "__main__":
    sys.exit(main())
