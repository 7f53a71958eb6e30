#!/usr/bin/env python3
"""Convenience entry point for running the CLI from a source checkout."""

from save_system.cli import main as _main


if __name__ == "__main__":
    raise SystemExit(_main())
