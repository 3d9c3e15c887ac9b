"""
Unsigned integer reconstruction for binlog column values.

The binlog row decoder reads fixed-width integer columns as signed values.
For columns declared ``UNSIGNED`` a stored value above the signed maximum
comes back negative; these helpers map it back to what MySQL stored.

Usage:
    convert_unsigned_tinyint(-1)          # 255
    convert_unsigned(-1, 'INT')           # 4294967295

Reference: https://dev.mysql.com/doc/refman/8.0/en/integer-types.html
"""
__all__ = [
    'TINYINT_MAX_VALUE',
    'SMALLINT_MAX_VALUE',
    'MEDIUMINT_MAX_VALUE',
    'INT_MAX_VALUE',
    'UNSIGNED_MAX_VALUES',
    'convert_unsigned_tinyint',
    'convert_unsigned_smallint',
    'convert_unsigned_mediumint',
    'convert_unsigned_integer',
    'convert_unsigned',
]

TINYINT_MAX_VALUE = 255
SMALLINT_MAX_VALUE = 65535
MEDIUMINT_MAX_VALUE = 16777215
INT_MAX_VALUE = 4294967295

UNSIGNED_MAX_VALUES: dict[str, int] = {
    'TINYINT': TINYINT_MAX_VALUE,
    'SMALLINT': SMALLINT_MAX_VALUE,
    'MEDIUMINT': MEDIUMINT_MAX_VALUE,
    'INT': INT_MAX_VALUE,
    'INTEGER': INT_MAX_VALUE,
}


def _to_unsigned(value: int, max_value: int) -> int:
    if value < 0:
        return value + max_value + 1
    return value


def convert_unsigned_tinyint(value: int) -> int:
    """Correct a signed 8-bit read of a ``TINYINT UNSIGNED`` column.
    """
    return _to_unsigned(value, TINYINT_MAX_VALUE)


def convert_unsigned_smallint(value: int) -> int:
    """Correct a signed 16-bit read of a ``SMALLINT UNSIGNED`` column.
    """
    return _to_unsigned(value, SMALLINT_MAX_VALUE)


def convert_unsigned_mediumint(value: int) -> int:
    """Correct a signed 24-bit read of a ``MEDIUMINT UNSIGNED`` column.
    """
    return _to_unsigned(value, MEDIUMINT_MAX_VALUE)


def convert_unsigned_integer(value: int) -> int:
    """Correct a signed 32-bit read of an ``INT UNSIGNED`` column.
    """
    return _to_unsigned(value, INT_MAX_VALUE)


def convert_unsigned(value: int | None, column_type: str) -> int | None:
    """Correct a signed read according to the declared column type.

    Args:
        value: Value as decoded by the signed reader, or None for NULL
        column_type: Declared MySQL type name, e.g. 'TINYINT' or 'int'

    Returns
        The unsigned value, or None when value is None

    Raises
        ValueError: If column_type is not a fixed-width integer type
    """
    try:
        max_value = UNSIGNED_MAX_VALUES[column_type.strip().upper()]
    except KeyError:
        available = list(UNSIGNED_MAX_VALUES)
        raise ValueError(f'Unsupported unsigned column type: {column_type}. Available: {available}')
    if value is None:
        return None
    return _to_unsigned(value, max_value)
