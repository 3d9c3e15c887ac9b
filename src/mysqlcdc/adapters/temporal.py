"""
Zero date handling for PyMySQL result decoding.

MySQL can store ``0000-00-00`` dates and ``0000-00-00 00:00:00`` datetimes,
which have no Python equivalent. PyMySQL hands these back as raw strings.
The connection parameter ``zeroDateTimeBehavior`` selects what happens
instead; its value is spelled differently per server generation
(``convertToNull`` vs ``CONVERT_TO_NULL``) but the spellings mean the same.

Supported behaviours:
- convertToNull: zero values decode to None
- round: zero values decode to the smallest representable value
- exception: zero values raise a DataError
"""
import datetime
import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

from pymysql.constants import FIELD_TYPE
from pymysql.converters import conversions as default_conversions
from pymysql.err import DataError

logger = logging.getLogger(__name__)

__all__ = [
    'ZERO_DATE',
    'normalize_behavior',
    'is_zero_date',
    'zero_datetime_conversions',
]

ZERO_DATE = '0000-00-00'

CONVERT_TO_NULL = 'converttonull'
ROUND = 'round'
EXCEPTION = 'exception'

_DATE_FIELDS = (FIELD_TYPE.DATE, FIELD_TYPE.NEWDATE)
_DATETIME_FIELDS = (FIELD_TYPE.DATETIME, FIELD_TYPE.TIMESTAMP)


def normalize_behavior(behavior: str) -> str:
    """Reduce any accepted spelling to a canonical lower-case token.

    'convertToNull', 'CONVERT_TO_NULL' and 'convert_to_null' all map to
    'converttonull'.
    """
    return behavior.replace('_', '').strip().lower()


def is_zero_date(value: Any) -> bool:
    """Check whether a raw decoder value is a zero date or datetime."""
    if isinstance(value, (bytes, bytearray)):
        value = value.decode('ascii', errors='replace')
    return isinstance(value, str) and value.startswith(ZERO_DATE)


def _replace_zero(converter: Callable[[Any], Any], behavior: str,
                  rounded: Any) -> Callable[[Any], Any]:
    @wraps(converter)
    def inner(value):
        if not is_zero_date(value):
            return converter(value)
        if behavior == CONVERT_TO_NULL:
            return None
        if behavior == ROUND:
            return rounded
        raise DataError(f'Zero date value {value!r} cannot be represented')

    return inner


def zero_datetime_conversions(behavior: str) -> dict:
    """Build a PyMySQL ``conv`` mapping for the given zero date behaviour.

    Unknown behaviours fall back to the driver defaults.
    """
    conversions = dict(default_conversions)
    token = normalize_behavior(behavior)
    if token not in {CONVERT_TO_NULL, ROUND, EXCEPTION}:
        logger.debug(f'Unknown zeroDateTimeBehavior {behavior}, using driver defaults')
        return conversions

    for field_type in _DATE_FIELDS:
        if field_type in conversions:
            conversions[field_type] = _replace_zero(
                conversions[field_type], token, datetime.date.min)
    for field_type in _DATETIME_FIELDS:
        if field_type in conversions:
            conversions[field_type] = _replace_zero(
                conversions[field_type], token, datetime.datetime.min)
    return conversions
