"""
MySQL session bootstrap and type-coercion layer for change-data-capture.

Provides:
- MySqlConnection: session context that applies TLS properties, probes the
  server generation and runs the introspection queries
- connect(): create and start a MySqlConnection from options
- convert_unsigned_*: repair signed binlog reads of UNSIGNED integer columns
"""
__version__ = '0.1.0'

from mysqlcdc.adapters.unsigned import UNSIGNED_MAX_VALUES, convert_unsigned
from mysqlcdc.adapters.unsigned import convert_unsigned_integer
from mysqlcdc.adapters.unsigned import convert_unsigned_mediumint
from mysqlcdc.adapters.unsigned import convert_unsigned_smallint
from mysqlcdc.adapters.unsigned import convert_unsigned_tinyint
from mysqlcdc.capability import CapabilityClass
from mysqlcdc.configuration import Configuration, Field
from mysqlcdc.connection import MySqlConnection, connect
from mysqlcdc.exceptions import ConfigurationConflict, ConnectionEstablishmentFailure
from mysqlcdc.exceptions import ConnectorError, DbConnectionError
from mysqlcdc.exceptions import IntrospectionFailure, ShutdownAnomaly
from mysqlcdc.exceptions import ValidationError
from mysqlcdc.introspection import set_statement_for
from mysqlcdc.modes import EventProcessingFailureHandlingMode
from mysqlcdc.modes import SecureConnectionMode
from mysqlcdc.options import ConnectorOptions
from mysqlcdc.properties import SecurePropertyScope, SystemProperties
from mysqlcdc.properties import system_properties

__all__ = [
    'connect',
    'MySqlConnection',
    'ConnectorOptions',
    'Configuration',
    'Field',
    'CapabilityClass',
    'SecureConnectionMode',
    'EventProcessingFailureHandlingMode',
    'SecurePropertyScope',
    'SystemProperties',
    'system_properties',
    'set_statement_for',
    'UNSIGNED_MAX_VALUES',
    'convert_unsigned',
    'convert_unsigned_tinyint',
    'convert_unsigned_smallint',
    'convert_unsigned_mediumint',
    'convert_unsigned_integer',
    'ConnectorError',
    'ConfigurationConflict',
    'ConnectionEstablishmentFailure',
    'IntrospectionFailure',
    'ShutdownAnomaly',
    'ValidationError',
    'DbConnectionError',
]
