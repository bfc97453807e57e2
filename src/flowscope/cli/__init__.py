"""Command-line interface for flowscope."""
