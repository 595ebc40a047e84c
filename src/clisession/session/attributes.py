"""Session-scoped attribute storage.

Command handlers use attributes to set up a "context" that later
commands in the same session pick up, e.g. a selected database or a
working directory. A handler that sets such a context should also offer a
command to leave it.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, TypeVar, runtime_checkable

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=type)

_APPLICATION_SCOPED = "__clisession_application_scoped__"


@runtime_checkable
class Destroyable(Protocol):
    """A value that owns resources and must be torn down explicitly."""

    def destroy(self) -> None:
        ...


def application_scoped(cls: T) -> T:
    """Mark a class whose instances outlive any single session.

    Instances stored as attributes are dropped at session end but not
    destroyed, since other sessions may still use them.
    """
    setattr(cls, _APPLICATION_SCOPED, True)
    return cls


def is_application_scoped(value: object) -> bool:
    return bool(getattr(type(value), _APPLICATION_SCOPED, False))


class AttributeStore:
    """Mapping from string keys to opaque, possibly destroyable values."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def keys(self) -> list[str]:
        return list(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def destroy_all(self) -> int:
        """Tear down destroyable values and clear the store.

        Values that are not :class:`Destroyable`, or whose class is
        application scoped, are dropped without teardown. A failing
        teardown is logged and the remaining values are still processed.

        Returns:
            Number of values torn down.
        """
        values, self._values = self._values, {}
        destroyed = 0
        for key, value in values.items():
            if not isinstance(value, Destroyable) or is_application_scoped(value):
                continue
            try:
                value.destroy()
                destroyed += 1
            except Exception:
                logger.exception("Failed to destroy attribute %r", key)
        return destroyed
