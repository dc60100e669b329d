from __future__ import annotations

from .cli import app


def main() -> None:
    """Entry point for running the quiz from the command line."""
    app(prog_name="songquiz")


if __name__ == "__main__":
    main()
