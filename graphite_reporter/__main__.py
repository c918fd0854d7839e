"""Main entry point when running as module."""

from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
