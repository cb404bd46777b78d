"""workspace-config: Layered, folder-scoped configuration with change tracking.

This library resolves effective configuration values from four layers:
- Defaults (built-in properties schema)
- User settings (typically ~/.config/<app>/settings.json)
- Workspace settings (the active folder's <root>/<dir>/settings.json)
- Memory (runtime-only overrides)

Every change is diffed against the previous merged tree; listeners receive
the minimal set of changed keys and can ask whether a change affects a given
resource.

Public API:
    Configurations: Orchestrator owning the layers and folder sources
    Configuration: Four-layer composite
    ConfigurationModel: Value tree of a single layer
    WorkspaceConfiguration: Read-only view returned by get_configuration
    ConfigurationChangeEvent: Event passed to on_did_change listeners
    ConfigPaths, ConfigurationTarget, ErrorItem, ConfigurationInspect: Data models
    get_changed_keys, deep_merge: Tree utilities
    ConfigError, ConfigFileError: Exception types

Example:
    ```python
    from pathlib import Path
    from workspace_config import Configurations, ConfigPaths

    configurations = Configurations(ConfigPaths(user=Path.home() / ".config" / "app" / "settings.json"))
    configurations.on_did_change(lambda event: print(sorted(event.changed_keys)))

    # Folder files live at <root>/<dir>/<file>
    configurations.add_folder_file("/work/project/.app/settings.json")

    editor = configurations.get_configuration("editor", resource="file:///work/project/main.py")
    font_size = editor.get("fontSize", 12)
    ```
"""

from .configuration import Configuration
from .exceptions import ConfigError
from .exceptions import ConfigFileError
from .manager import ConfigurationChangeEvent
from .manager import ConfigurationProxy
from .manager import Configurations
from .model import ConfigurationModel
from .models import ConfigPaths
from .models import ConfigurationInspect
from .models import ConfigurationTarget
from .models import ErrorItem
from .utils import deep_merge
from .utils import get_changed_keys
from .view import WorkspaceConfiguration

__version__ = "0.1.0"

__all__ = [
    "Configurations",
    "Configuration",
    "ConfigurationModel",
    "WorkspaceConfiguration",
    "ConfigurationChangeEvent",
    "ConfigurationProxy",
    "ConfigPaths",
    "ConfigurationTarget",
    "ConfigurationInspect",
    "ErrorItem",
    "deep_merge",
    "get_changed_keys",
    "ConfigError",
    "ConfigFileError",
]
