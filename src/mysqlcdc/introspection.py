"""
Read-only diagnostic queries against the source server.

The results gate later pipeline stages: the GTID set decides how the binlog
reader resumes, the privilege check decides the snapshot locking strategy and
the variable snapshots are replayed before parsing the schema history.

Every query streams its result into a consumer and closes the result (and
any connection opened for it) on every exit path. Driver errors are wrapped
in IntrospectionFailure and never retried here.
"""
import logging
from collections.abc import Callable, Mapping
from contextlib import AbstractContextManager
from typing import Any, TypeVar

from mysqlcdc.exceptions import IntrospectionFailure, QueryError

logger = logging.getLogger(__name__)

__all__ = [
    'GTID_STATUS_STATEMENT',
    'GRANTS_STATEMENT',
    'CHARSET_VARIABLES_STATEMENT',
    'SYSTEM_VARIABLES_STATEMENT',
    'SessionIntrospector',
    'set_statement_for',
]

T = TypeVar('T')
ConnectionProvider = Callable[[], AbstractContextManager[Any]]

GTID_STATUS_STATEMENT = 'SHOW MASTER STATUS'
GRANTS_STATEMENT = 'SHOW GRANTS FOR CURRENT_USER'
CHARSET_VARIABLES_STATEMENT = (
    "SHOW VARIABLES WHERE Variable_name IN ('character_set_server','collation_server')"
)
SYSTEM_VARIABLES_STATEMENT = 'SHOW VARIABLES'

# Column index of Executed_Gtid_Set in SHOW MASTER STATUS
_GTID_COLUMN = 4


def set_statement_for(variables: Mapping[str, str | None]) -> str:
    """Serialize variables into a single SET statement.

    Names are sorted so the statement is reproducible. Values containing a
    comma or semicolon are single-quoted; None is written as empty.

    >>> set_statement_for({'b': 'x,y', 'a': '1'})
    "SET a=1, b='x,y';"
    """
    assignments = []
    for name in sorted(variables):
        value = variables[name]
        if value is None:
            value = ''
        if ',' in value or ';' in value:
            value = f"'{value}'"
        assignments.append(f'{name}={value}')
    return 'SET ' + ', '.join(assignments) + ';'


def _read_gtid_set(result: Any) -> str:
    if len(result.keys()) <= _GTID_COLUMN:
        return ''
    row = result.fetchone()
    if row is None:
        return ''
    return row[_GTID_COLUMN] or ''


def _read_variables(result: Any) -> dict[str, str]:
    variables = {}
    for row in result:
        name, value = row[0], row[1]
        if name is None or value is None:
            continue
        variables[name] = value
        logger.debug(f'\t{name:<45} = {value:<45}')
    return variables


class SessionIntrospector:
    """Runs diagnostic queries through the supplied connection providers.

    Args:
        connection: Provider yielding the shared session connection
        fresh_connection: Provider yielding a new connection closed after use,
            defaults to connection
    """

    def __init__(self, connection: ConnectionProvider,
                 fresh_connection: ConnectionProvider | None = None) -> None:
        self._connection = connection
        self._fresh_connection = fresh_connection or connection

    def query(self, sql: str, consumer: Callable[[Any], T], fresh: bool = False) -> T:
        """Execute sql and hand the result to consumer.

        The result is closed once the consumer returns or raises.
        """
        provider = self._fresh_connection if fresh else self._connection
        with provider() as cn:
            result = cn.exec_driver_sql(sql)
            try:
                return consumer(result)
            finally:
                result.close()

    def known_gtid_set(self) -> str:
        """Determine the GTID set executed by the server.

        Returns an empty string when the server does not use GTIDs, never None.
        """
        try:
            gtid_set = self.query(GTID_STATUS_STATEMENT, _read_gtid_set)
        except QueryError as e:
            raise IntrospectionFailure(
                f'Unexpected error while connecting to MySQL and looking at GTID mode: {e}') from e
        logger.debug(f'Known GTID set: {gtid_set!r}')
        return gtid_set

    def user_has_privileges(self, grant_name: str) -> bool:
        """Determine if the current user has the named privilege.

        A user holding ALL privileges has every named privilege.
        """
        wanted = grant_name.upper()

        def consume(result):
            found = False
            for row in result:
                grants = row[0]
                logger.debug(grants)
                if grants is None:
                    continue
                grants = grants.upper()
                if 'ALL' in grants or wanted in grants:
                    found = True
            return found

        try:
            return self.query(GRANTS_STATEMENT, consume)
        except QueryError as e:
            raise IntrospectionFailure(
                'Unexpected error while connecting to MySQL and looking at '
                f'privileges for current user: {e}') from e

    def read_charset_system_variables(self) -> dict[str, str]:
        """Read the server character set and collation variables.
        """
        logger.debug('Reading MySQL charset-related system variables before parsing DDL history.')
        return self._read_variables(CHARSET_VARIABLES_STATEMENT)

    def read_system_variables(self) -> dict[str, str]:
        """Read all server system variables.
        """
        logger.debug('Reading MySQL system variables')
        return self._read_variables(SYSTEM_VARIABLES_STATEMENT)

    def _read_variables(self, statement: str) -> dict[str, str]:
        try:
            return self.query(statement, _read_variables, fresh=True)
        except QueryError as e:
            raise IntrospectionFailure(f'Error reading MySQL variables: {e}') from e

    set_statement_for = staticmethod(set_statement_for)
