"""Module entrypoint for running pdfspeech as ``python -m pdfspeech``."""

from __future__ import annotations

from pdfspeech.cli import main


if __name__ == "__main__":
    main()
