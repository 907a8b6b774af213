"""
.. Custom Exceptions
"""

from __future__ import annotations


class Img2AnsiError(Exception):
    """Exception baseclass. Raised for generic errors."""


class InputError(Img2AnsiError):
    """Raised for unreadable sources, malformed image data and unrecognized URLs."""


class NetworkError(Img2AnsiError):
    """Raised for failed HTTP(S) requests and unacceptable responses."""


class URLNotFoundError(NetworkError, FileNotFoundError):
    """Raised for 404 errors."""


class WriteError(Img2AnsiError):
    """Raised when rendered output cannot be written."""


class ConfigError(Img2AnsiError):
    """Raised for invalid configuration e.g an unknown color palette."""
