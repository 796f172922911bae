"""Module entrypoint for running Voicedesk as ``python -m voicedesk``."""

from __future__ import annotations

from voicedesk.cli import main


if __name__ == "__main__":
    main()
