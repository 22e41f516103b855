#!/usr/bin/env python3
"""
Notekeeper TUI entry point.

Usage:
    python tui.py
    python tui.py --debug
"""

import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from notekeeper.tui.app import run_tui


def main() -> None:
    run_tui(debug="--debug" in sys.argv)


if __name__ == "__main__":
    main()
