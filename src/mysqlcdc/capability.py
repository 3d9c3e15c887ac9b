"""
Server generation detection.

MySQL 8 and the drivers built for it spell some connection parameter values
differently from earlier generations. The capability class is probed once,
on the first physical connection, and cached by the connection context.
"""
import logging
import re
from enum import Enum
from typing import Any

from mysqlcdc.exceptions import ConnectionEstablishmentFailure

logger = logging.getLogger(__name__)

__all__ = [
    'CapabilityClass',
    'VERSION_QUERY',
    'ZERO_DATETIME_BEHAVIOR',
    'parse_major_version',
    'classify',
    'probe_capability',
    'zero_datetime_behavior',
]

VERSION_QUERY = 'SELECT VERSION()'

_VERSION_REGEX = re.compile(r'^\s*(\d+)')


class CapabilityClass(Enum):
    PRE_8 = 'pre_8'
    V8_OR_LATER = 'v8_or_later'


# Same meaning, generation-specific spelling
ZERO_DATETIME_BEHAVIOR: dict[CapabilityClass, str] = {
    CapabilityClass.PRE_8: 'convertToNull',
    CapabilityClass.V8_OR_LATER: 'CONVERT_TO_NULL',
}


def zero_datetime_behavior(capability: CapabilityClass | None) -> str:
    """Return the zeroDateTimeBehavior literal for a capability class.

    Before the server has been probed the PRE_8 spelling is used.
    """
    return ZERO_DATETIME_BEHAVIOR[capability or CapabilityClass.PRE_8]


def parse_major_version(version: str) -> int:
    """Extract the major version from a server version string like '8.0.35-log'.
    """
    match = _VERSION_REGEX.match(version or '')
    if not match:
        raise ConnectionEstablishmentFailure(f'Unable to determine MySQL server version from {version!r}')
    return int(match.group(1))


def classify(major_version: int) -> CapabilityClass:
    if major_version < 8:
        return CapabilityClass.PRE_8
    return CapabilityClass.V8_OR_LATER


def probe_capability(dbapi_connection: Any) -> CapabilityClass:
    """Query the server version on a raw DBAPI connection and classify it.

    Errors raised by the driver propagate unchanged.
    """
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute(VERSION_QUERY)
        row = cursor.fetchone()
    finally:
        cursor.close()
    version = row[0] if row else None
    if isinstance(version, (bytes, bytearray)):
        version = version.decode()
    capability = classify(parse_major_version(version))
    logger.debug(f'MySQL server version {version} classified as {capability.name}')
    return capability
