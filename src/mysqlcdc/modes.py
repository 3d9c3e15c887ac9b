"""
Closed enumerations parsed from connector configuration strings.

The literal values are an external contract shared with existing
deployments and must not be renamed.
"""
from enum import Enum
from typing import Self

__all__ = ['SecureConnectionMode', 'EventProcessingFailureHandlingMode']


class _ParsableMode(str, Enum):

    @classmethod
    def parse(cls, value: str | None, default: str | Self | None = None) -> Self | None:
        """Parse a configured value, ignoring case and surrounding whitespace.

        Hyphens are accepted in place of underscores ('verify-ca').
        Returns the parsed default (or None) when value is missing or unknown.
        """
        if value is not None:
            text = value.strip().lower().replace('-', '_')
            for mode in cls:
                if mode.value == text:
                    return mode
        if default is None or isinstance(default, cls):
            return default
        return cls.parse(default)


class SecureConnectionMode(_ParsableMode):
    """TLS mode for the connection to the server."""

    DISABLED = 'disabled'
    PREFERRED = 'preferred'
    REQUIRED = 'required'
    VERIFY_CA = 'verify_ca'
    VERIFY_IDENTITY = 'verify_identity'

    @property
    def verifies_certificate(self) -> bool:
        return self in {SecureConnectionMode.VERIFY_CA, SecureConnectionMode.VERIFY_IDENTITY}


class EventProcessingFailureHandlingMode(_ParsableMode):
    """What to do when an event cannot be processed.

    IGNORE is the older spelling of SKIP and is kept for existing deployments.
    """

    FAIL = 'fail'
    WARN = 'warn'
    SKIP = 'skip'
    IGNORE = 'ignore'
