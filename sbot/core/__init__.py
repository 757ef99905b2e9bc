"""Core types: results, exit codes, configuration, checkout detection."""

from .config import Config, ConfigError, load_config, load_config_or_default
from .errors import ErrorCode
from .result import Err, Ok, Result, is_err, is_ok
from .workspace import Workspace, WorkspaceError, detect_workspace

__all__ = [
    # config
    "Config",
    "ConfigError",
    "load_config",
    "load_config_or_default",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
    # workspace
    "Workspace",
    "WorkspaceError",
    "detect_workspace",
]
