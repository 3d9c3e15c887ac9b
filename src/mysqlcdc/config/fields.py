"""
Connector configuration fields read by the session layer.
"""
from mysqlcdc.configuration import Field

HOSTNAME = Field('database.hostname', description='Resolvable hostname or IP address of the MySQL server')
PORT = Field('database.port', default=3306, description='Port of the MySQL server')
USER = Field('database.user', description='Name of the MySQL user')
PASSWORD = Field('database.password', description='Password of the MySQL user')

SSL_MODE = Field('database.ssl.mode', default='disabled',
                 description='Whether to use an encrypted connection to the server')
SSL_KEYSTORE = Field('database.ssl.keystore', description='Location of the client certificate')
SSL_KEYSTORE_PASSWORD = Field('database.ssl.keystore.password',
                              description='Password protecting the client key')
SSL_TRUSTSTORE = Field('database.ssl.truststore', description='Location of the trusted CA bundle')
SSL_TRUSTSTORE_PASSWORD = Field('database.ssl.truststore.password',
                                description='Password of the trusted CA bundle')

EVENT_DESERIALIZATION_FAILURE_HANDLING_MODE = Field(
    'event.deserialization.failure.handling.mode', default='fail',
    description='How to handle binlog events that cannot be deserialized')
INCONSISTENT_SCHEMA_HANDLING_MODE = Field(
    'inconsistent.schema.handling.mode', default='fail',
    description='How to handle events for tables missing from the schema history')

PROGRAM_NAME = Field('database.program.name', description='Client program name reported to the server')

DATABASE_HISTORY = Field('database.history', description='Schema history implementation')
DATABASE_HISTORY_PREFIX = 'database.history.'

DATABASE_PREFIX = 'database.'

# Driver-level key, read after the 'database.' prefix is removed
LEGACY_DATETIME = 'useLegacyDatetimeCode'
