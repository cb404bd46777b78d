"""Read-only configuration view handed to callers."""

from collections.abc import Iterator
from collections.abc import Mapping
from typing import TYPE_CHECKING
from typing import Any

from .configuration import Configuration
from .models import ConfigurationInspect
from .utils import look_up

if TYPE_CHECKING:
    from .manager import Configurations


class WorkspaceConfiguration(Mapping[str, Any]):
    """Snapshot of the effective configuration below an optional section.

    Keys and values of the section are exposed through the ``Mapping``
    interface (dotted keys are accepted by ``view["a.b"]``), while ``has``,
    ``get``, ``update`` and ``inspect`` are methods, so configuration keys
    never shadow them. Values are deep-frozen; ``update`` goes back through the
    owning ``Configurations`` and does not change this snapshot.
    """

    def __init__(self, owner: "Configurations", configuration: Configuration, section: str | None = None):
        object.__setattr__(self, "_owner", owner)
        object.__setattr__(self, "_configuration", configuration)
        object.__setattr__(self, "_section", section or None)
        object.__setattr__(self, "_config", configuration.get_value(section))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is read-only")

    def _qualify(self, key: str) -> str:
        return f"{self._section}.{key}" if self._section else key

    def has(self, key: str) -> bool:
        return look_up(self._config, key) is not None

    def get(self, key: str, default: Any = None) -> Any:
        value = look_up(self._config, key)
        return default if value is None else value

    def update(self, key: str, value: Any, is_user: bool = False) -> set[str]:
        """Set (or remove, with ``value=None``) a key relative to the section.

        Returns:
            Keys whose effective value changed
        """
        return self._owner.update_value(self._qualify(key), value, is_user)

    def inspect(self, key: str) -> ConfigurationInspect:
        return self._configuration.inspect(self._qualify(key))

    def __getitem__(self, key: str) -> Any:
        value = look_up(self._config, key)
        if value is None:
            raise KeyError(key)
        return value

    def __iter__(self) -> Iterator[str]:
        return iter(self._config) if isinstance(self._config, Mapping) else iter(())

    def __len__(self) -> int:
        return len(self._config) if isinstance(self._config, Mapping) else 0

    def __repr__(self) -> str:
        section = f"{self._section!r}, " if self._section else ""
        return f"WorkspaceConfiguration({section}{dict(self)!r})"
