"""
Exception hierarchy for yank.
"""


class YankError(Exception):
    """Base exception for yank errors."""


class ConfigError(YankError):
    """Raised when flags or a config file are invalid."""


class PatternError(ConfigError):
    """Raised when a glob or ignore pattern cannot be compiled."""


class DiscoveryError(YankError):
    """Raised when the working tree cannot be enumerated."""


class ClipboardError(YankError):
    """Raised when the output cannot be written to the clipboard."""


class NoFilesMatchedError(YankError):
    """Raised when no file survives include/ignore filtering."""


class FileReadError(YankError):
    """Raised when a survivor cannot be turned into text."""
