"""
Notekeeper Application Package.

- core/: Configuration, logging, exceptions, resilience helpers
- notes/: Note management engine (cache, view state, search, sharing, session)
- cli/: Command-line client (Typer + Rich)
- tui/: Terminal user interface (Textual)
"""

__version__ = "0.1.0"
