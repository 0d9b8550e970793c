"""shellout CLI bootstrap."""

from __future__ import annotations

from shellout.cli import app

if __name__ == "__main__":
    app()
