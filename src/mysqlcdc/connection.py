"""
MySQL session context for the change-data-capture connector.

This module provides:
1. The `MySqlConnection` class, the context that owns one connector's session
   to the source server
2. The `connect()` function for creating and starting a context from options

The MySqlConnection:
- derives the driver parameters from the connector configuration, dropping
  schema history settings
- applies the TLS properties on `start()` and restores them on `shutdown()`
- opens PyMySQL connections through a SQLAlchemy engine whose creator injects
  the TLS and zero date settings and probes the server generation once
- exposes the read-only introspection queries used by snapshotting and
  schema history recovery
"""
import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import fields as dataclass_fields
from typing import Any, Self, TypeVar

import pymysql
import sqlalchemy as sa
from mysqlcdc.adapters.temporal import zero_datetime_conversions
from mysqlcdc.capability import CapabilityClass, probe_capability
from mysqlcdc.capability import zero_datetime_behavior
from mysqlcdc.config import fields
from mysqlcdc.configuration import Configuration
from mysqlcdc.exceptions import ShutdownAnomaly
from mysqlcdc.introspection import SessionIntrospector, set_statement_for
from mysqlcdc.modes import EventProcessingFailureHandlingMode
from mysqlcdc.modes import SecureConnectionMode
from mysqlcdc.options import ConnectorOptions
from mysqlcdc.properties import SecurePropertyScope, SystemProperties
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool

from libb import load_options, scriptname

__all__ = [
    'CONNECTION_URL_TEMPLATE',
    'MySqlConnection',
    'connect',
    'driver_configuration',
]

logger = logging.getLogger(__name__)

T = TypeVar('T')

CONNECTION_URL_TEMPLATE = (
    'mysql+pymysql://{hostname}:{port}/?useInformationSchema=true'
    '&nullCatalogMeansCurrent=false&useSSL={useSSL}&useUnicode=true'
    '&characterEncoding=UTF-8&characterSetResults=UTF-8'
    '&zeroDateTimeBehavior={zeroDateTimeBehavior}'
)

USE_SSL = 'useSSL'
ZERO_DATETIME_BEHAVIOR = 'zeroDateTimeBehavior'


def driver_configuration(config: Configuration) -> Configuration:
    """Narrow the connector configuration to the driver settings.

    Schema history keys are removed and the 'database.' prefix is stripped.
    """
    def is_driver_key(key: str) -> bool:
        return not (key.startswith(fields.DATABASE_HISTORY_PREFIX)
                    or key == fields.DATABASE_HISTORY.name)

    return config.filter(is_driver_key).subset(fields.DATABASE_PREFIX, remove_prefix=True)


class MySqlConnection:
    """Session context for one connector's connection to MySQL.

    Args:
        config: Connector configuration with dotted keys
        property_store: Process-wide property table for the TLS settings,
            defaults to the shared one
        engine_factory: Creates the SQLAlchemy engine
        driver_connect: Opens a raw DBAPI connection from keyword arguments

    Usage:
        with MySqlConnection(config) as cn:
            gtids = cn.known_gtid_set()
    """

    def __init__(self, config: Configuration,
                 property_store: SystemProperties | None = None,
                 engine_factory: Callable[..., Engine] = sa.create_engine,
                 driver_connect: Callable[..., Any] = pymysql.connect) -> None:
        self._config = config
        self._driver_config = driver_configuration(config)
        self._secure_properties = SecurePropertyScope(config, property_store)
        self._engine_factory = engine_factory
        self._driver_connect = driver_connect
        self._engine: Engine | None = None
        self._connection: sa.engine.Connection | None = None
        self._capability: CapabilityClass | None = None
        self._lock = threading.RLock()
        self._introspector = SessionIntrospector(self.connection, self.new_connection)

    def __enter__(self) -> Self:
        self.start()
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.shutdown()

    def __repr__(self) -> str:
        return f'MySqlConnection({self.hostname}:{self.port})'

    @property
    def config(self) -> Configuration:
        return self._config

    @property
    def logger(self) -> logging.Logger:
        return logger

    @property
    def hostname(self) -> str | None:
        return self._config.get_string(fields.HOSTNAME)

    @property
    def port(self) -> int:
        return self._config.get_integer(fields.PORT)

    @property
    def username(self) -> str | None:
        return self._config.get_string(fields.USER)

    @property
    def password(self) -> str | None:
        return self._config.get_string(fields.PASSWORD)

    @property
    def ssl_mode(self) -> SecureConnectionMode:
        """Configured TLS mode, `disabled` when unset."""
        return self._secure_properties.ssl_mode

    @property
    def ssl_mode_enabled(self) -> bool:
        return self._secure_properties.enabled

    @property
    def event_deserialization_failure_handling_mode(self) -> EventProcessingFailureHandlingMode:
        field = fields.EVENT_DESERIALIZATION_FAILURE_HANDLING_MODE
        return EventProcessingFailureHandlingMode.parse(self._config.get_string(field), field.default)

    @property
    def inconsistent_schema_handling_mode(self) -> EventProcessingFailureHandlingMode:
        field = fields.INCONSISTENT_SCHEMA_HANDLING_MODE
        return EventProcessingFailureHandlingMode.parse(self._config.get_string(field), field.default)

    @property
    def capability(self) -> CapabilityClass | None:
        """Server generation, None until the first connection has been made."""
        return self._capability

    @property
    def secure_properties(self) -> SecurePropertyScope:
        return self._secure_properties

    def start(self) -> None:
        """Apply the TLS properties for this context.

        Does nothing when TLS is disabled. On a ConfigurationConflict the
        properties applied so far are restored before the error propagates.
        """
        try:
            self._secure_properties.apply()
        except Exception:
            self._secure_properties.restore()
            raise
        logger.debug(f'Started {self!r} (ssl mode {self.ssl_mode.value})')

    def shutdown(self) -> None:
        """Close the connection, then restore the TLS properties.

        Errors while closing are logged and never prevent restoration.
        """
        try:
            self.close()
        except ShutdownAnomaly as e:
            logger.error(f'Unexpected error shutting down the database connection: {e}')
        finally:
            self._secure_properties.restore()
            logger.debug(f'Shut down {self!r}')

    def close(self) -> None:
        """Close the managed connection and dispose of the engine.

        Raises ShutdownAnomaly if either step fails.
        """
        with self._lock:
            connection, self._connection = self._connection, None
            engine, self._engine = self._engine, None
        try:
            try:
                if connection is not None and not connection.closed:
                    connection.close()
            finally:
                if engine is not None:
                    engine.dispose()
        except Exception as e:
            raise ShutdownAnomaly(f'Error closing connection to {self.hostname}:{self.port}: {e}') from e

    def connection_parameters(self) -> Configuration:
        """Build the driver parameters for the next physical connection.
        """
        params = self._driver_config.edit({
            USE_SSL: str(self.ssl_mode_enabled).lower(),
            ZERO_DATETIME_BEHAVIOR: zero_datetime_behavior(self._capability),
        })
        legacy_datetime = params.get_string(fields.LEGACY_DATETIME)
        if legacy_datetime is None:
            params = params.with_(fields.LEGACY_DATETIME, 'false')
        elif legacy_datetime.strip().lower() == 'true':
            logger.warning(f"'{fields.LEGACY_DATETIME}' is set to 'true'. This setting is "
                           'not recommended and can result in timezone issues.')
        return params

    def connection_string(self) -> str:
        """Render the connection URL for the current parameters.

        The URL carries no credentials and is safe to log.
        """
        params = self.connection_parameters()
        return CONNECTION_URL_TEMPLATE.format(
            hostname=params.get_string('hostname', ''),
            port=params.get_integer('port', fields.PORT.default),
            useSSL=params.get_string(USE_SSL),
            zeroDateTimeBehavior=params.get_string(ZERO_DATETIME_BEHAVIOR),
        )

    def driver_arguments(self, params: Configuration | None = None) -> dict[str, Any]:
        """Translate driver parameters into PyMySQL connect arguments.
        """
        params = params if params is not None else self.connection_parameters()
        kwargs: dict[str, Any] = {
            'host': params.get_string('hostname'),
            'port': params.get_integer('port', fields.PORT.default),
            'user': params.get_string('user'),
            'password': params.get_string('password', ''),
            'charset': 'utf8mb4',
            'program_name': params.get_string('program.name') or scriptname() or 'python_console',
            'conv': zero_datetime_conversions(params.get_string(ZERO_DATETIME_BEHAVIOR)),
        }
        if params.get_boolean(USE_SSL, False):
            kwargs['ssl'] = self._secure_properties.ssl_args()
        return kwargs

    def _create_dbapi_connection(self) -> Any:
        """Open a physical connection, probing the server on first use.
        """
        kwargs = self.driver_arguments()
        logger.debug(f'Connecting to {self.connection_string()}')
        dbapi_connection = self._driver_connect(**kwargs)
        try:
            self._check_capability(dbapi_connection)
        except Exception:
            dbapi_connection.close()
            raise
        return dbapi_connection

    def _check_capability(self, dbapi_connection: Any) -> None:
        with self._lock:
            if self._capability is None:
                self._capability = probe_capability(dbapi_connection)

    @property
    def engine(self) -> Engine:
        """SQLAlchemy engine for this context, created on first use."""
        with self._lock:
            if self._engine is None:
                url = sa.URL.create(
                    drivername='mysql+pymysql',
                    username=self.username,
                    password=self.password,
                    host=self.hostname,
                    port=self.port,
                )
                self._engine = self._engine_factory(
                    url, creator=self._create_dbapi_connection, poolclass=NullPool, echo=False)
                logger.debug(f'Created new engine for {self!r}')
            return self._engine

    def _open_autocommit(self) -> sa.engine.Connection:
        """Open a connection whose statements never leave a transaction open.
        """
        cn = self.engine.connect()
        cn.execution_options(isolation_level='AUTOCOMMIT')
        return cn

    @contextmanager
    def connection(self) -> Iterator[sa.engine.Connection]:
        """Yield the managed connection, opening it if needed.

        The connection stays open after the block; `shutdown()` closes it.
        """
        with self._lock:
            if self._connection is None or self._connection.closed:
                self._connection = self._open_autocommit()
                logger.debug(f'Opened managed connection for {self!r}')
            yield self._connection

    @contextmanager
    def new_connection(self) -> Iterator[sa.engine.Connection]:
        """Yield a new connection that is closed when the block exits.
        """
        cn = self._open_autocommit()
        try:
            yield cn
        finally:
            cn.close()

    def query(self, sql: str, consumer: Callable[[Any], T]) -> T:
        """Run sql on the managed connection and pass the result to consumer.
        """
        return self._introspector.query(sql, consumer)

    def known_gtid_set(self) -> str:
        """GTID set executed by the server, empty when GTIDs are not in use."""
        return self._introspector.known_gtid_set()

    def user_has_privileges(self, grant_name: str) -> bool:
        """Whether the current user holds the named privilege, or ALL."""
        return self._introspector.user_has_privileges(grant_name)

    def read_charset_system_variables(self) -> dict[str, str]:
        return self._introspector.read_charset_system_variables()

    def read_system_variables(self) -> dict[str, str]:
        return self._introspector.read_system_variables()

    set_statement_for = staticmethod(set_statement_for)


@load_options(cls=ConnectorOptions)
def connect(options: ConnectorOptions | dict[str, Any] | str,
            config: Any | None = None, **kw: Any) -> MySqlConnection:
    """Create, start and connect a MySqlConnection

    Args:
        options: Can be:
                - ConnectorOptions object
                - String path to configuration
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        Started MySqlConnection with its managed connection open
    """
    if isinstance(options, ConnectorOptions):
        for field in dataclass_fields(options):
            kw.pop(field.name, None)
    else:
        options_func = load_options(cls=ConnectorOptions)(lambda o, c: o)
        options = options_func(options, config, **kw)

    cn = MySqlConnection(options.to_configuration())
    cn.start()
    try:
        with cn.connection():
            pass
    except Exception:
        cn.shutdown()
        raise
    logger.debug(f'Connected {cn!r} via {cn.connection_string()}')
    return cn
