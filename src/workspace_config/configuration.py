"""Composite of the four configuration layers."""

from typing import Any

from .model import ConfigurationModel
from .models import ConfigurationInspect
from .utils import deep_freeze
from .utils import look_up


class Configuration:
    """Merged view over defaults, user, workspace and memory layers.

    Resolution order (highest to lowest priority):
    1. Memory (runtime-only overrides)
    2. Workspace settings (active folder)
    3. User settings
    4. Defaults

    The merged tree is recomputed on every read, so the result only depends
    on the four models it was built from.
    """

    def __init__(
        self,
        defaults: ConfigurationModel,
        user: ConfigurationModel,
        workspace: ConfigurationModel,
        memory: ConfigurationModel | None = None,
    ):
        self._defaults = defaults
        self._user = user
        self._workspace = workspace
        self._memory = memory if memory is not None else ConfigurationModel()

    @property
    def defaults(self) -> ConfigurationModel:
        return self._defaults

    @property
    def user(self) -> ConfigurationModel:
        return self._user

    @property
    def workspace(self) -> ConfigurationModel:
        return self._workspace

    @property
    def memory(self) -> ConfigurationModel:
        return self._memory

    def _consolidate(self) -> ConfigurationModel:
        return ConfigurationModel().merge(self._defaults, self._user, self._workspace, self._memory)

    def get_value(self, key: str | None = None) -> Any:
        """Get the merged value at a dotted key, or the whole merged tree.

        Returns:
            Deep-frozen value, or None when no layer defines the key
        """
        return deep_freeze(look_up(self._consolidate().contents, key))

    def inspect(self, key: str) -> ConfigurationInspect:
        """Get the raw value each persisted layer contributes for ``key``."""
        return ConfigurationInspect(
            key=key,
            default_value=self._defaults.get_value(key),
            global_value=self._user.get_value(key),
            workspace_value=self._workspace.get_value(key),
        )
