"""Configuration orchestrator for layered, folder-scoped settings."""

import logging
import threading
from collections.abc import Callable
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from typing import Protocol

from .configuration import Configuration
from .events import Disposable
from .events import Emitter
from .events import dispose_all
from .model import ConfigurationModel
from .models import ConfigPaths
from .models import ConfigurationTarget
from .models import ErrorItem
from .parser import load_default_configuration
from .parser import parse_file
from .paths import absolute_path
from .paths import folder_root
from .paths import is_parent_folder
from .paths import uri_to_path
from .utils import add_to_value_tree
from .utils import get_changed_keys
from .utils import thaw
from .view import WorkspaceConfiguration
from .watcher import watch_file

logger = logging.getLogger(__name__)

Parser = Callable[[Path | str | None], tuple[dict[str, Any], list[ErrorItem]]]
Watcher = Callable[[Path | str, Callable[[], None]], Disposable]


class ConfigurationProxy(Protocol):
    """Remote process that mirrors programmatic updates."""

    def set_option(self, target: ConfigurationTarget, key: str, value: Any) -> None: ...

    def remove_option(self, target: ConfigurationTarget, key: str) -> None: ...


class ConfigurationChangeEvent:
    """Describes one accepted configuration change.

    Attributes:
        changed_keys: Maximal dotted keys whose effective value changed
        target: Layer that was replaced
    """

    def __init__(
        self,
        changed_keys: set[str],
        target: ConfigurationTarget,
        previous_config_file: Path | None = None,
        config_file: Path | None = None,
    ):
        self.changed_keys = frozenset(changed_keys)
        self.target = target
        self._roots = [folder_root(f) for f in (previous_config_file, config_file) if f is not None]

    def affects_configuration(self, section: str, resource: str | None = None) -> bool:
        """Check whether ``section`` changed for ``resource``.

        Workspace changes only apply to files inside the previous or the new
        workspace folder. Containment compares whole path segments: a root of
        ``/proj`` contains ``/proj/src/x.ts`` but not ``/project/x.ts``.

        Args:
            section: Dotted configuration key
            resource: URI of the resource being configured (optional)

        Returns:
            True if the change affects the section for that resource
        """
        if section not in self.changed_keys:
            return False
        if not resource or self.target is not ConfigurationTarget.WORKSPACE:
            return True
        path = uri_to_path(resource)
        if path is None or not self._roots:
            return True
        return any(is_parent_folder(root, path) for root in self._roots)

    def __repr__(self) -> str:
        return f"ConfigurationChangeEvent({self.target.value}, {sorted(self.changed_keys)})"


class Configurations:
    """Tracks configuration layers and notifies about effective changes.

    Layers are defaults (built-in schema), the user file, the active folder
    file (workspace) and an in-memory overlay. Every mutation goes through
    ``change_configuration``, which diffs the merged trees and fires
    ``on_did_change`` only when some effective value changed. Snapshots are
    replaced wholesale, never mutated.

    Args:
        paths: Host paths (user settings file, home directory)
        proxy: Remote process receiving ``update()`` calls (optional)
        parser: Settings file parser
        watcher: File watcher factory
        defaults_loader: Source of the defaults tree
        test_mode: Skip forwarding updates to the proxy

    Example:
        ```python
        configurations = Configurations(ConfigPaths(user=Path("~/.config/app/settings.json").expanduser()))
        configurations.on_did_change(lambda e: print(e.changed_keys))
        configurations.add_folder_file("/work/project/.app/settings.json")
        configurations.get_configuration("editor").get("fontSize", 12)
        ```
    """

    def __init__(
        self,
        paths: ConfigPaths | None = None,
        proxy: ConfigurationProxy | None = None,
        *,
        parser: Parser = parse_file,
        watcher: Watcher = watch_file,
        defaults_loader: Callable[[], dict[str, Any]] = load_default_configuration,
        test_mode: bool = False,
    ):
        self.paths = paths or ConfigPaths()
        self.workspace_config_file: Path | None = None
        self._proxy = proxy
        self._parser = parser
        self._watcher = watcher
        self._test_mode = test_mode
        # watchdog callbacks arrive on the observer thread
        self._lock = threading.RLock()
        self._error_items: list[ErrorItem] = []
        self._folder_configurations: dict[Path, ConfigurationModel] = {}
        self._on_error: Emitter[list[ErrorItem]] = Emitter()
        self._on_did_change: Emitter[ConfigurationChangeEvent] = Emitter()
        self._disposables: list[Disposable] = []
        self._disposed = False

        user = self._parse(self.paths.user)
        self._configuration = Configuration(
            ConfigurationModel(defaults_loader()),
            user,
            ConfigurationModel(),
            ConfigurationModel(),
        )
        self._watch_file(self.paths.user, ConfigurationTarget.USER)

    # ===== Events =====

    def on_error(self, listener: Callable[[list[ErrorItem]], None]) -> Disposable:
        return self._on_error.event(listener)

    def on_did_change(self, listener: Callable[[ConfigurationChangeEvent], None]) -> Disposable:
        return self._on_did_change.event(listener)

    # ===== State Accessors =====

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    @property
    def defaults(self) -> ConfigurationModel:
        return self._configuration.defaults

    @property
    def user(self) -> ConfigurationModel:
        return self._configuration.user

    @property
    def workspace(self) -> ConfigurationModel:
        return self._configuration.workspace

    @property
    def error_items(self) -> list[ErrorItem]:
        return list(self._error_items)

    @property
    def folder_configurations(self) -> dict[Path, ConfigurationModel]:
        return dict(self._folder_configurations)

    @property
    def folders(self) -> list[Path]:
        """Roots of all registered folder sources, in registration order."""
        return [folder_root(config_file) for config_file in self._folder_configurations]

    def has_folder_configuration(self, filepath: Path | str) -> bool:
        return any(is_parent_folder(folder, filepath) for folder in self.folders)

    def get_config_file(self, target: ConfigurationTarget) -> Path | None:
        """Get the file backing a layer, if any."""
        if target is ConfigurationTarget.USER:
            return self.paths.user
        if target is ConfigurationTarget.WORKSPACE:
            return self.workspace_config_file
        return None

    # ===== Programmatic Updates =====

    def extends_defaults(self, props: Mapping[str, Any]) -> None:
        """Add entries to the defaults layer without firing a change event.

        Args:
            props: Dotted keys and their default values
        """
        with self._lock:
            contents = thaw(self.defaults.contents)
            for key, value in props.items():
                add_to_value_tree(contents, key, thaw(value), lambda message: logger.error(message))
            current = self._configuration
            self._configuration = Configuration(
                ConfigurationModel(contents),
                current.user,
                current.workspace,
                current.memory,
            )

    def update_user_config(self, props: Mapping[str, Any]) -> set[str]:
        """Apply a batch of edits to the user layer without touching the file.

        ``None`` removes a key; a mapping value is written one level deep as
        ``key.sub`` entries.

        Returns:
            Changed keys (empty if nothing changed)
        """
        with self._lock:
            model = self.user.clone()
            for key, value in props.items():
                if value is None:
                    model.remove_value(key)
                elif isinstance(value, Mapping):
                    for sub_key, sub_value in value.items():
                        model.set_value(f"{key}.{sub_key}", sub_value)
                else:
                    model.set_value(key, value)
            return self.change_configuration(ConfigurationTarget.USER, model)

    def update_value(self, key: str, value: Any, is_user: bool = False) -> set[str]:
        """Set or remove (``value=None``) a dotted key in user or workspace layer.

        Writes the user layer when no folder file is active or ``is_user`` is
        set, otherwise the active workspace layer. The same edit is forwarded
        to the proxy unless running in test mode.

        Returns:
            Changed keys (empty if nothing changed)
        """
        with self._lock:
            if not self.workspace_config_file:
                is_user = True
            target = ConfigurationTarget.USER if is_user else ConfigurationTarget.WORKSPACE
            model = (self.user if is_user else self.workspace).clone()
            if value is None:
                model.remove_value(key)
            else:
                model.set_value(key, value)
            config_file = self.get_config_file(target)
            if target is ConfigurationTarget.WORKSPACE:
                self._store_folder_model(config_file, model)
            changed = self.change_configuration(target, model, config_file)

        if self._proxy is not None and not self._test_mode:
            if value is None:
                self._proxy.remove_option(target, key)
            else:
                self._proxy.set_option(target, key, value)
        return changed

    # ===== Folder Sources =====

    def add_folder_file(self, filepath: Path | str) -> None:
        """Register a folder-level settings file and make it the workspace layer.

        Files whose folder would be the home directory are ignored.
        """
        config_file = absolute_path(filepath)
        with self._lock:
            if config_file in self._folder_configurations:
                return
            if folder_root(config_file) == absolute_path(self.paths.home):
                logger.debug(f"Skipping folder configuration in home directory: {config_file}")
                return
            model = self._parse(config_file)
            self._folder_configurations[config_file] = model
            logger.info(f"Added folder configuration {config_file}")
            self._watch_file(config_file, ConfigurationTarget.WORKSPACE)
            self.change_configuration(ConfigurationTarget.WORKSPACE, model, config_file)

    def set_folder_configuration(self, uri: str) -> None:
        """Make the folder source containing ``uri`` the workspace layer."""
        path = uri_to_path(uri)
        if path is None:
            return
        with self._lock:
            config_file = self._find_folder_file(path)
            if config_file is None or config_file == self.workspace_config_file:
                return
            self.change_configuration(
                ConfigurationTarget.WORKSPACE, self._folder_configurations[config_file], config_file
            )

    def _find_folder_file(self, path: Path) -> Path | None:
        # Deepest root wins; equal roots keep registration order
        found: Path | None = None
        depth = -1
        for config_file in self._folder_configurations:
            root = folder_root(config_file)
            if is_parent_folder(root, path) and len(root.parts) > depth:
                found, depth = config_file, len(root.parts)
        return found

    def _get_folder_configuration(self, uri: str) -> ConfigurationModel:
        path = uri_to_path(uri)
        config_file = self._find_folder_file(path) if path is not None else None
        if config_file is None:
            return ConfigurationModel()
        return self._folder_configurations[config_file]

    # ===== Change Pipeline =====

    def change_configuration(
        self,
        target: ConfigurationTarget,
        model: ConfigurationModel,
        config_file: Path | str | None = None,
    ) -> set[str]:
        """Replace one layer and notify listeners if effective values changed.

        Args:
            target: Layer to replace
            model: New model for that layer (must not be mutated afterwards)
            config_file: File the model came from (makes it the active workspace file)

        An empty diff is a no-op: the snapshot and the active workspace file
        stay as they are and nothing fires.

        Returns:
            Changed keys; empty when no effective value changed
        """
        config_file = absolute_path(config_file) if config_file is not None else None
        with self._lock:
            current = self._configuration
            configuration = Configuration(
                model if target is ConfigurationTarget.DEFAULTS else current.defaults,
                model if target is ConfigurationTarget.USER else current.user,
                model if target is ConfigurationTarget.WORKSPACE else current.workspace,
                model if target is ConfigurationTarget.MEMORY else current.memory,
            )
            changed = get_changed_keys(current.get_value(), configuration.get_value())
            if not changed:
                logger.debug(f"No effective change in {target.value} configuration")
                return changed

            previous_config_file = self.workspace_config_file
            if target is ConfigurationTarget.WORKSPACE:
                self.workspace_config_file = config_file
            self._configuration = configuration
            logger.info(f"Configuration changed in {target.value} scope: {', '.join(sorted(changed))}")
            self._on_did_change.fire(
                ConfigurationChangeEvent(
                    changed,
                    target,
                    previous_config_file,
                    config_file if target is ConfigurationTarget.WORKSPACE else None,
                )
            )
            return changed

    # ===== Reading =====

    def get_configuration(self, section: str | None = None, resource: str | None = None) -> WorkspaceConfiguration:
        """Get a read-only view of the effective configuration.

        Args:
            section: Dotted prefix all keys of the view are relative to
            resource: URI whose folder source replaces the active workspace layer

        Returns:
            WorkspaceConfiguration snapshot
        """
        with self._lock:
            configuration = self._configuration
            if resource:
                configuration = Configuration(
                    configuration.defaults,
                    configuration.user,
                    self._get_folder_configuration(resource),
                    configuration.memory,
                )
        return WorkspaceConfiguration(self, configuration, section)

    # ===== Lifecycle =====

    def dispose(self) -> None:
        """Stop all file watchers and drop listeners."""
        with self._lock:
            self._disposed = True
        dispose_all(self._disposables)
        self._disposables.clear()
        self._on_error.dispose()
        self._on_did_change.dispose()

    # ===== Private Helpers =====

    def _parse(self, path: Path | str | None) -> ConfigurationModel:
        contents, errors = self._parser(path)
        self._handle_errors(errors)
        return ConfigurationModel(contents)

    def _handle_errors(self, errors: list[ErrorItem]) -> None:
        if errors:
            self._error_items.extend(errors)
            self._on_error.fire(list(errors))

    def _watch_file(self, path: Path | str | None, target: ConfigurationTarget) -> None:
        if path is None or not Path(path).exists():
            return
        if self._configuration.get_value("files.watch") is False:
            logger.debug(f"File watching disabled, not watching {path}")
            return

        def on_change() -> None:
            with self._lock:
                if self._disposed:
                    return
                model = self._parse(path)
                if target is ConfigurationTarget.WORKSPACE:
                    self._store_folder_model(path, model)
                self.change_configuration(target, model, path)

        self._disposables.append(self._watcher(path, on_change))

    def _store_folder_model(self, config_file: Path | str | None, model: ConfigurationModel) -> None:
        # Folder sources track their file's latest contents, active or not
        if config_file is None:
            return
        config_file = absolute_path(config_file)
        if config_file in self._folder_configurations:
            self._folder_configurations[config_file] = model
