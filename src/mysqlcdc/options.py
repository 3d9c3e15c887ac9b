from dataclasses import dataclass

from mysqlcdc.config import fields
from mysqlcdc.configuration import Configuration
from mysqlcdc.exceptions import ValidationError
from mysqlcdc.modes import EventProcessingFailureHandlingMode
from mysqlcdc.modes import SecureConnectionMode

from libb import ConfigOptions, scriptname

__all__ = ['ConnectorOptions']


@dataclass
class ConnectorOptions(ConfigOptions):
    """Options

    Typed view of the connector settings read by the session layer.
    Converted to a dotted-key Configuration with `to_configuration`.

    supported ssl modes: `disabled`, `preferred`, `required`, `verify_ca`,
    `verify_identity`

    supported failure handling modes: `fail`, `warn`, `skip`, `ignore`
    """
    hostname: str = None
    port: int = 3306
    username: str = None
    password: str = None
    ssl_mode: str = 'disabled'
    ssl_keystore: str = None
    ssl_keystore_password: str = None
    ssl_truststore: str = None
    ssl_truststore_password: str = None
    legacy_datetime: bool = None
    event_deserialization_failure_handling_mode: str = 'fail'
    inconsistent_schema_handling_mode: str = 'fail'
    appname: str = None

    def __post_init__(self):
        missing = [name for name in ('hostname', 'username') if not getattr(self, name)]
        if missing:
            raise ValidationError(f'Missing required options: {missing}')
        if SecureConnectionMode.parse(self.ssl_mode) is None:
            available = [m.value for m in SecureConnectionMode]
            raise ValidationError(f'ssl_mode must be one of: {available}')
        for name in ('event_deserialization_failure_handling_mode',
                     'inconsistent_schema_handling_mode'):
            if EventProcessingFailureHandlingMode.parse(getattr(self, name)) is None:
                available = [m.value for m in EventProcessingFailureHandlingMode]
                raise ValidationError(f'{name} must be one of: {available}')
        self.port = int(self.port)
        self.appname = self.appname or scriptname() or 'python_console'

    def to_configuration(self) -> Configuration:
        """Build the dotted-key connector configuration."""
        values = {
            fields.HOSTNAME.name: self.hostname,
            fields.PORT.name: self.port,
            fields.USER.name: self.username,
            fields.PASSWORD.name: self.password,
            fields.SSL_MODE.name: self.ssl_mode,
            fields.SSL_KEYSTORE.name: self.ssl_keystore,
            fields.SSL_KEYSTORE_PASSWORD.name: self.ssl_keystore_password,
            fields.SSL_TRUSTSTORE.name: self.ssl_truststore,
            fields.SSL_TRUSTSTORE_PASSWORD.name: self.ssl_truststore_password,
            fields.EVENT_DESERIALIZATION_FAILURE_HANDLING_MODE.name:
                self.event_deserialization_failure_handling_mode,
            fields.INCONSISTENT_SCHEMA_HANDLING_MODE.name: self.inconsistent_schema_handling_mode,
            fields.PROGRAM_NAME.name: self.appname,
        }
        if self.legacy_datetime is not None:
            values[fields.DATABASE_PREFIX + fields.LEGACY_DATETIME] = str(bool(self.legacy_datetime)).lower()
        return Configuration({k: v for k, v in values.items() if v is not None})
