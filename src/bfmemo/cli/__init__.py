"""bfmemo CLI.

Usage:
    bfmemo path /data/a.fake --directory ~/.cache/bfmemo
    bfmemo open "img&sizeX=64&sleepInitFile=500.fake" --in-place --min-elapsed 100
    bfmemo inspect /data/a.fake --in-place
    bfmemo clear ~/.cache/bfmemo --dry-run
"""

from bfmemo.cli.main import main

__all__ = ["main"]
