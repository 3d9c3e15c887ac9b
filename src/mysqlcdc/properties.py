"""
Process-wide TLS properties and the scope that borrows them.

Client certificate and trust locations are read from a process-wide property
table when the PyMySQL connection arguments are built, rather than from each
connection's own configuration. A connector that needs TLS therefore writes its keystore and
truststore locations into that table for as long as it is connected, and
puts back whatever was there before when it shuts down.

SecurePropertyScope owns that borrowing:
1. apply() writes each configured property that is not already set
2. a property already set to the same value (ignoring case) is left alone
   and will not be cleared on restore
3. a property already set to a different value is a ConfigurationConflict
4. restore() writes back the previous values, or clears properties that
   were previously absent

The table is shared by every context in the process. Contexts with
different TLS settings must not run concurrently.
"""
import logging
import ssl
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from mysqlcdc.config import fields
from mysqlcdc.configuration import Configuration, Field
from mysqlcdc.exceptions import ConfigurationConflict, ValidationError
from mysqlcdc.modes import SecureConnectionMode

logger = logging.getLogger(__name__)

__all__ = [
    'KEYSTORE',
    'KEYSTORE_PASSWORD',
    'TRUSTSTORE',
    'TRUSTSTORE_PASSWORD',
    'SystemProperties',
    'system_properties',
    'SecurePropertyOverride',
    'SecurePropertyScope',
]

KEYSTORE = 'ssl.keystore'
KEYSTORE_PASSWORD = 'ssl.keystore.password'
TRUSTSTORE = 'ssl.truststore'
TRUSTSTORE_PASSWORD = 'ssl.truststore.password'


class SystemProperties:
    """Thread-safe process-wide property table.
    """

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})
        self._lock = threading.RLock()

    def get(self, name: str) -> str | None:
        with self._lock:
            return self._values.get(name)

    def set(self, name: str, value: str) -> str | None:
        """Set a property and return its previous value."""
        with self._lock:
            previous = self._values.get(name)
            self._values[name] = value
            return previous

    def clear(self, name: str) -> str | None:
        """Remove a property and return its previous value."""
        with self._lock:
            return self._values.pop(name, None)

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return dict(self._values)


system_properties = SystemProperties()


@dataclass(frozen=True)
class SecurePropertyOverride:
    """One property written by a scope, with what it replaced."""
    name: str
    value: str
    previous: str | None = None


# property name -> (configuration field, show value in conflict errors)
_SECURE_PROPERTIES: tuple[tuple[str, Field, bool], ...] = (
    (KEYSTORE, fields.SSL_KEYSTORE, True),
    (KEYSTORE_PASSWORD, fields.SSL_KEYSTORE_PASSWORD, False),
    (TRUSTSTORE, fields.SSL_TRUSTSTORE, True),
    (TRUSTSTORE_PASSWORD, fields.SSL_TRUSTSTORE_PASSWORD, False),
)


def _parse_ssl_mode(config: Configuration) -> SecureConnectionMode:
    """Read the configured TLS mode, `disabled` only when the key is absent.

    Raises ValidationError for a value that names no known mode.
    """
    value = config.get_string(fields.SSL_MODE.name)
    if value is None:
        return SecureConnectionMode.parse(fields.SSL_MODE.default)
    mode = SecureConnectionMode.parse(value)
    if mode is None:
        available = [m.value for m in SecureConnectionMode]
        raise ValidationError(f"Unknown value '{value}' for '{fields.SSL_MODE.name}', "
                              f'must be one of: {available}')
    return mode


class SecurePropertyScope:
    """Applies and restores the TLS properties of one connection context.

    Args:
        config: Connector configuration
        store: Property table to write, defaults to the process-wide one
    """

    def __init__(self, config: Configuration, store: SystemProperties | None = None) -> None:
        self.config = config
        self.store = store if store is not None else system_properties
        self._overrides: dict[str, SecurePropertyOverride] = {}
        self._lock = threading.RLock()
        self._ssl_mode = _parse_ssl_mode(config)

    @property
    def ssl_mode(self) -> SecureConnectionMode:
        return self._ssl_mode

    @property
    def enabled(self) -> bool:
        return self.ssl_mode != SecureConnectionMode.DISABLED

    @property
    def overrides(self) -> Mapping[str, SecurePropertyOverride]:
        return MappingProxyType(dict(self._overrides))

    def apply(self) -> None:
        """Write the configured TLS properties into the store.

        Raises ConfigurationConflict if a property already holds a different
        value. Properties applied before the conflict stay recorded so that
        restore() undoes them.
        """
        if not self.enabled:
            logger.debug('SSL disabled, no secure properties to apply')
            return
        with self._lock:
            for name, field, show_value in _SECURE_PROPERTIES:
                self._apply_property(name, field, show_value)

    def _apply_property(self, name: str, field: Field, show_value: bool) -> None:
        value = self.config.get_string(field)
        if value is None:
            return
        value = value.strip()
        existing = self.store.get(name)
        if existing is None:
            previous = self.store.set(name, value)
            self._overrides[name] = SecurePropertyOverride(name, value, previous)
            logger.debug(f'Set secure property {name}')
            return
        existing = existing.strip()
        if existing.lower() == value.lower():
            logger.debug(f'Secure property {name} already set to the configured value')
            return
        if show_value:
            msg = (f"Property '{name}' is already defined as {existing}, but the "
                   f"configuration property '{field.name}' defines a different value '{value}'")
        else:
            msg = (f"Property '{name}' is already defined, but the configuration "
                   f"property '{field.name}' defines a different value")
        raise ConfigurationConflict(msg)

    def restore(self) -> None:
        """Put back every property this scope changed, then forget them.
        """
        with self._lock:
            for override in self._overrides.values():
                if override.previous is not None:
                    self.store.set(override.name, override.previous)
                else:
                    self.store.clear(override.name)
                logger.debug(f'Restored secure property {override.name}')
            self._overrides.clear()

    def ssl_args(self) -> ssl.SSLContext | None:
        """Build the PyMySQL ``ssl`` argument from the current properties.

        PyMySQL uses an SSLContext as given, so hostname checking for
        `verify_identity` holds whether or not a truststore is set; without
        one the system CA bundle is trusted. Returns None when TLS is disabled.
        """
        mode = self.ssl_mode
        if mode == SecureConnectionMode.DISABLED:
            return None
        ctx = ssl.create_default_context(cafile=self.store.get(TRUSTSTORE) or None)
        # check_hostname must be cleared before CERT_NONE is allowed
        ctx.check_hostname = mode == SecureConnectionMode.VERIFY_IDENTITY
        ctx.verify_mode = ssl.CERT_REQUIRED if mode.verifies_certificate else ssl.CERT_NONE
        keystore = self.store.get(KEYSTORE)
        if keystore:
            ctx.load_cert_chain(keystore, password=self.store.get(KEYSTORE_PASSWORD) or None)
        return ctx
