"""Value tree container for a single configuration layer."""

import logging
from collections.abc import Callable
from typing import Any

from .utils import add_to_value_tree
from .utils import deep_freeze
from .utils import deep_merge
from .utils import get_configuration_keys
from .utils import look_up
from .utils import remove_from_value_tree
from .utils import thaw

logger = logging.getLogger(__name__)


def _log_conflict(message: str) -> None:
    logger.warning(message)


class ConfigurationModel:
    """A tree of configuration values plus the dotted keys of its leaves.

    Models are immutable by convention once handed to a ``Configuration``:
    edits are made on a ``clone()`` so snapshots that are about to be compared
    never share state.

    Args:
        contents: Initial value tree (copied)
        conflict_reporter: Receives messages for dropped conflicting writes
    """

    def __init__(
        self,
        contents: dict[str, Any] | None = None,
        conflict_reporter: Callable[[str], None] = _log_conflict,
    ):
        self._contents: dict[str, Any] = thaw(contents) if contents else {}
        self._keys: set[str] = get_configuration_keys(self._contents)
        self._conflict_reporter = conflict_reporter

    @property
    def contents(self) -> dict[str, Any]:
        return self._contents

    @property
    def keys(self) -> frozenset[str]:
        return frozenset(self._keys)

    def get_value(self, key: str | None = None) -> Any:
        """Get the frozen value at a dotted key, or the whole tree."""
        return deep_freeze(look_up(self._contents, key))

    def set_value(self, key: str, value: Any) -> None:
        add_to_value_tree(self._contents, key, thaw(value), self._conflict_reporter)
        self._keys = get_configuration_keys(self._contents)

    def remove_value(self, key: str) -> None:
        remove_from_value_tree(self._contents, key)
        self._keys = get_configuration_keys(self._contents)

    def merge(self, *others: "ConfigurationModel") -> "ConfigurationModel":
        """Return a new model with ``others`` merged on top, in order."""
        contents = self._contents
        for other in others:
            contents = deep_merge(contents, other.contents)
        return ConfigurationModel(contents, self._conflict_reporter)

    def clone(self) -> "ConfigurationModel":
        return ConfigurationModel(self._contents, self._conflict_reporter)

    def __repr__(self) -> str:
        return f"ConfigurationModel({self._contents!r})"
