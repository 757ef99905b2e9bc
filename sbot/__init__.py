"""sbot - CI automation for the stdlib repository (lint, copyright, labels, hooks)."""

__version__ = "0.1.0"
