"""
Value adapters applied to decoded MySQL column values.
"""
from mysqlcdc.adapters.temporal import zero_datetime_conversions
from mysqlcdc.adapters.unsigned import UNSIGNED_MAX_VALUES, convert_unsigned
from mysqlcdc.adapters.unsigned import convert_unsigned_integer
from mysqlcdc.adapters.unsigned import convert_unsigned_mediumint
from mysqlcdc.adapters.unsigned import convert_unsigned_smallint
from mysqlcdc.adapters.unsigned import convert_unsigned_tinyint

__all__ = [
    'UNSIGNED_MAX_VALUES',
    'convert_unsigned',
    'convert_unsigned_tinyint',
    'convert_unsigned_smallint',
    'convert_unsigned_mediumint',
    'convert_unsigned_integer',
    'zero_datetime_conversions',
]
