import pytest
from mysqlcdc.exceptions import ValidationError
from mysqlcdc.options import ConnectorOptions


def test_init_defaults():
    """Test default initialization"""
    options = ConnectorOptions(
        hostname='testhost',
        username='testuser',
        password='testpass',
    )

    assert options.port == 3306
    assert options.ssl_mode == 'disabled'
    assert options.event_deserialization_failure_handling_mode == 'fail'
    assert options.inconsistent_schema_handling_mode == 'fail'
    assert options.legacy_datetime is None
    assert options.appname is not None


def test_validation():
    """Test validation rules"""
    with pytest.raises(ValueError):
        ConnectorOptions(hostname='testhost')

    with pytest.raises(ValidationError, match='ssl_mode'):
        ConnectorOptions(hostname='testhost', username='u', ssl_mode='sometimes')

    with pytest.raises(ValidationError, match='inconsistent_schema_handling_mode'):
        ConnectorOptions(hostname='testhost', username='u',
                         inconsistent_schema_handling_mode='explode')


def test_to_configuration():
    """Test conversion to dotted-key configuration"""
    options = ConnectorOptions(
        hostname='testhost',
        port='3307',
        username='testuser',
        password='testpass',
        ssl_mode='required',
        ssl_truststore='/etc/ca.pem',
        legacy_datetime=True,
        appname='cdc-test',
    )
    config = options.to_configuration()

    assert config['database.hostname'] == 'testhost'
    assert config.get_integer('database.port') == 3307
    assert config['database.user'] == 'testuser'
    assert config['database.ssl.mode'] == 'required'
    assert config['database.ssl.truststore'] == '/etc/ca.pem'
    assert config['database.useLegacyDatetimeCode'] == 'true'
    assert config['database.program.name'] == 'cdc-test'
    assert 'database.ssl.keystore' not in config


if __name__ == '__main__':
    __import__('pytest').main([__file__])
