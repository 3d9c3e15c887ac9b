"""
Tests for zero date handling in PyMySQL decoding.
"""
import datetime

import pytest
from mysqlcdc.adapters.temporal import is_zero_date, normalize_behavior
from mysqlcdc.adapters.temporal import zero_datetime_conversions
from pymysql.constants import FIELD_TYPE
from pymysql.converters import conversions as default_conversions
from pymysql.err import DataError


@pytest.mark.parametrize('spelling', ['convertToNull', 'CONVERT_TO_NULL', 'convert_to_null'])
def test_spellings_are_equivalent(spelling):
    """Both generation-specific spellings select the same behaviour"""
    assert normalize_behavior(spelling) == 'converttonull'


def test_is_zero_date():
    assert is_zero_date('0000-00-00')
    assert is_zero_date('0000-00-00 00:00:00')
    assert is_zero_date(b'0000-00-00')
    assert not is_zero_date('2023-05-15')
    assert not is_zero_date(None)


def test_convert_to_null():
    """Zero dates decode to None, real dates decode normally"""
    conv = zero_datetime_conversions('CONVERT_TO_NULL')
    assert conv[FIELD_TYPE.DATE]('0000-00-00') is None
    assert conv[FIELD_TYPE.DATETIME]('0000-00-00 00:00:00') is None
    assert conv[FIELD_TYPE.TIMESTAMP]('0000-00-00 00:00:00') is None
    assert conv[FIELD_TYPE.DATE]('2023-05-15') == datetime.date(2023, 5, 15)
    assert conv[FIELD_TYPE.DATETIME]('2023-05-15 14:30:45') == datetime.datetime(2023, 5, 15, 14, 30, 45)


def test_round():
    conv = zero_datetime_conversions('round')
    assert conv[FIELD_TYPE.DATE]('0000-00-00') == datetime.date.min
    assert conv[FIELD_TYPE.DATETIME]('0000-00-00 00:00:00') == datetime.datetime.min


def test_exception():
    conv = zero_datetime_conversions('EXCEPTION')
    with pytest.raises(DataError):
        conv[FIELD_TYPE.DATE]('0000-00-00')


def test_unknown_behavior_keeps_driver_defaults():
    conv = zero_datetime_conversions('bogus')
    assert conv[FIELD_TYPE.DATE] is default_conversions[FIELD_TYPE.DATE]


def test_defaults_not_modified():
    """Building a mapping leaves the driver's module-level conversions alone"""
    original = default_conversions[FIELD_TYPE.DATE]
    zero_datetime_conversions('convertToNull')
    assert default_conversions[FIELD_TYPE.DATE] is original


if __name__ == '__main__':
    __import__('pytest').main([__file__])
