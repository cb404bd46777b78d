"""Exceptions for workspace-config."""

from pathlib import Path


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class ConfigFileError(ConfigError):
    """Error reading or parsing a configuration file.

    Attributes:
        path: File the error was found in
        line: Zero-based line of the problem, when known
        column: Zero-based column of the problem, when known
    """

    def __init__(self, message: str, path: Path | str | None = None, line: int = 0, column: int = 0):
        super().__init__(message)
        self.path = path
        self.line = line
        self.column = column
