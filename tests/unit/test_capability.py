"""
Tests for server generation probing and the spelling table.
"""
import pytest
from mysqlcdc.capability import VERSION_QUERY, CapabilityClass, classify
from mysqlcdc.capability import parse_major_version, probe_capability
from mysqlcdc.capability import zero_datetime_behavior
from mysqlcdc.exceptions import ConnectionEstablishmentFailure
from pymysql.err import OperationalError

from tests.fixtures.mocks import FakeDbapiConnection


@pytest.mark.parametrize(('version', 'major'), [
    ('5.7.44-log', 5),
    ('8.0.35', 8),
    ('10.11.6-MariaDB', 10),
    (' 8.4.0', 8),
])
def test_parse_major_version(version, major):
    assert parse_major_version(version) == major


@pytest.mark.parametrize('version', ['', None, 'unknown'])
def test_parse_major_version_invalid(version):
    with pytest.raises(ConnectionEstablishmentFailure):
        parse_major_version(version)


def test_classify():
    assert classify(5) is CapabilityClass.PRE_8
    assert classify(7) is CapabilityClass.PRE_8
    assert classify(8) is CapabilityClass.V8_OR_LATER
    assert classify(9) is CapabilityClass.V8_OR_LATER


def test_zero_datetime_spelling():
    """Each generation gets its own spelling; unprobed uses the PRE_8 one"""
    assert zero_datetime_behavior(CapabilityClass.PRE_8) == 'convertToNull'
    assert zero_datetime_behavior(CapabilityClass.V8_OR_LATER) == 'CONVERT_TO_NULL'
    assert zero_datetime_behavior(None) == 'convertToNull'


def test_probe_runs_one_query_and_closes_cursor():
    dbapi_connection = FakeDbapiConnection(version='5.7.44-log')
    assert probe_capability(dbapi_connection) is CapabilityClass.PRE_8
    assert len(dbapi_connection.cursors) == 1
    cursor = dbapi_connection.cursors[0]
    assert cursor.executed == [VERSION_QUERY]
    assert cursor.closed


def test_probe_decodes_bytes():
    assert probe_capability(FakeDbapiConnection(version=b'8.0.35')) is CapabilityClass.V8_OR_LATER


def test_probe_failure_propagates():
    """Driver errors are not swallowed or wrapped"""
    error = OperationalError(2013, 'Lost connection to MySQL server during query')
    dbapi_connection = FakeDbapiConnection(error=error)
    with pytest.raises(OperationalError):
        probe_capability(dbapi_connection)
    assert dbapi_connection.cursors[0].closed


if __name__ == '__main__':
    __import__('pytest').main([__file__])
