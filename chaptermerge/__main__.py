"""Module entrypoint for running chaptermerge as ``python -m chaptermerge``."""

from __future__ import annotations

from chaptermerge.cli import main


if __name__ == "__main__":
    main()
