"""Platform seams (subprocess execution)."""

from sbot.platform.process import ProcessError, run

__all__ = ["ProcessError", "run"]
