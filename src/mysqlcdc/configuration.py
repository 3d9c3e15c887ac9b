"""
Immutable dotted-key configuration.

A Configuration is a read-only mapping of dotted string keys
(``database.hostname``, ``database.ssl.mode``...) to values. Every narrowing
or editing operation returns a new Configuration; the original is never
mutated.

Usage:
    config = Configuration({'database.hostname': 'localhost', 'database.port': '3306'})
    config.get_integer(fields.PORT)                  # 3306
    config.subset('database.', remove_prefix=True)   # {'hostname': ..., 'port': ...}
"""
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

__all__ = ['Configuration', 'Field']

_TRUE_VALUES = {'true', 'yes', 'on', '1'}
_FALSE_VALUES = {'false', 'no', 'off', '0'}


@dataclass(frozen=True)
class Field:
    """A declared configuration key with its default value."""
    name: str
    default: Any = None
    description: str = ''

    def __str__(self) -> str:
        return self.name


def _key(field_or_key: 'Field | str') -> str:
    if isinstance(field_or_key, Field):
        return field_or_key.name
    return field_or_key


def _default(field_or_key: 'Field | str', default: Any) -> Any:
    if default is None and isinstance(field_or_key, Field):
        return field_or_key.default
    return default


class Configuration(Mapping):
    """Read-only mapping of dotted keys to values.
    """

    __slots__ = ('_values',)

    def __init__(self, values: Mapping[str, Any] | None = None, **kw: Any) -> None:
        merged = dict(values or {})
        merged.update(kw)
        self._values = MappingProxyType(merged)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return dict(self._values) == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset((k, str(v)) for k, v in self._values.items()))

    def __repr__(self) -> str:
        masked = {k: ('****' if 'password' in k.lower() else v)
                  for k, v in sorted(self._values.items())}
        return f'Configuration({masked})'

    def get_string(self, field_or_key: Field | str, default: str | None = None) -> str | None:
        """Get a value as a string, or the default when absent.
        """
        value = self._values.get(_key(field_or_key))
        if value is None:
            default = _default(field_or_key, default)
            return None if default is None else str(default)
        return str(value)

    def get_integer(self, field_or_key: Field | str, default: int | None = None) -> int | None:
        """Get a value as an integer, or the default when absent.

        Raises ValueError if the value is present but not numeric.
        """
        value = self._values.get(_key(field_or_key))
        if value is None:
            default = _default(field_or_key, default)
            return None if default is None else int(default)
        return int(str(value).strip())

    def get_boolean(self, field_or_key: Field | str, default: bool | None = None) -> bool | None:
        """Get a value as a boolean, or the default when absent.
        """
        value = self._values.get(_key(field_or_key))
        if value is None:
            default = _default(field_or_key, default)
            return None if default is None else bool(default)
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise ValueError(f'Not a boolean value for {_key(field_or_key)}: {value}')

    def has_key(self, field_or_key: Field | str) -> bool:
        return _key(field_or_key) in self._values

    def filter(self, predicate: Callable[[str], bool]) -> 'Configuration':
        """Return a new Configuration with only the keys matching predicate.
        """
        return Configuration({k: v for k, v in self._values.items() if predicate(k)})

    def subset(self, prefix: str, remove_prefix: bool = False) -> 'Configuration':
        """Return a new Configuration with the keys starting with prefix.

        Args:
            prefix: Key prefix, e.g. 'database.'
            remove_prefix: Strip the prefix from the returned keys
        """
        result = {}
        for key, value in self._values.items():
            if not key.startswith(prefix):
                continue
            if remove_prefix:
                key = key[len(prefix):]
                if not key:
                    continue
            result[key] = value
        return Configuration(result)

    def edit(self, changes: Mapping[str, Any] | None = None, **kw: Any) -> 'Configuration':
        """Return a new Configuration with the changes applied.

        A value of None removes the key.
        """
        merged = dict(self._values)
        updates = dict(changes or {})
        updates.update(kw)
        for key, value in updates.items():
            if value is None:
                merged.pop(key, None)
            else:
                merged[key] = value
        return Configuration(merged)

    def with_(self, field_or_key: Field | str, value: Any) -> 'Configuration':
        """Return a new Configuration with one key set.
        """
        return self.edit({_key(field_or_key): value})

    def as_dict(self) -> dict[str, Any]:
        return dict(self._values)
