"""
Connector-specific exception classes.
"""
import pymysql
from sqlalchemy import exc as sa_exc


class ConnectorError(Exception):
    """Base class for all connector session errors.
    """


class ConfigurationConflict(ConnectorError):
    """A process-wide property is already set to a different value.
    """


class ConnectionEstablishmentFailure(ConnectorError):
    """Error establishing the connection or classifying the server.
    """


class IntrospectionFailure(ConnectorError):
    """Error running a read-only diagnostic query.
    """


class ShutdownAnomaly(ConnectorError):
    """Error closing the underlying connection during shutdown.

    Only ever logged; shutdown never raises it.
    """


class ValidationError(ConnectorError, ValueError):
    """Error in input validation.
    """


DbConnectionError = (
    pymysql.err.OperationalError,
    pymysql.err.InterfaceError,
    sa_exc.OperationalError,
    sa_exc.InterfaceError,
    ConnectionEstablishmentFailure,
    )

QueryError = (
    pymysql.err.Error,
    sa_exc.DBAPIError,
    )
