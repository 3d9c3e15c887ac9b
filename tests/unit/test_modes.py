import pytest
from mysqlcdc.modes import EventProcessingFailureHandlingMode as FailureMode
from mysqlcdc.modes import SecureConnectionMode


@pytest.mark.parametrize(('value', 'expected'), [
    ('disabled', SecureConnectionMode.DISABLED),
    ('PREFERRED', SecureConnectionMode.PREFERRED),
    (' required ', SecureConnectionMode.REQUIRED),
    ('verify_ca', SecureConnectionMode.VERIFY_CA),
    ('Verify_Identity', SecureConnectionMode.VERIFY_IDENTITY),
    ('verify-ca', SecureConnectionMode.VERIFY_CA),
])
def test_parse_ssl_mode(value, expected):
    assert SecureConnectionMode.parse(value) is expected


def test_parse_unknown_returns_none_or_default():
    assert SecureConnectionMode.parse('bogus') is None
    assert SecureConnectionMode.parse(None) is None
    assert SecureConnectionMode.parse('bogus', 'disabled') is SecureConnectionMode.DISABLED
    assert SecureConnectionMode.parse(None, SecureConnectionMode.REQUIRED) is SecureConnectionMode.REQUIRED


def test_verifies_certificate():
    assert SecureConnectionMode.VERIFY_CA.verifies_certificate
    assert SecureConnectionMode.VERIFY_IDENTITY.verifies_certificate
    assert not SecureConnectionMode.REQUIRED.verifies_certificate


def test_failure_mode_literals():
    """The literal set is an external contract"""
    assert [m.value for m in FailureMode] == ['fail', 'warn', 'skip', 'ignore']
    assert FailureMode.parse('WARN') is FailureMode.WARN
    assert FailureMode.parse('nope', 'fail') is FailureMode.FAIL


if __name__ == '__main__':
    __import__('pytest').main([__file__])
