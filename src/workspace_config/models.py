"""Data models for workspace-config."""

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from pathlib import Path
from typing import Any


class ConfigurationTarget(Enum):
    """Configuration layer enumeration.

    Determines which slot of the composite configuration a change replaces.
    """

    DEFAULTS = "defaults"
    USER = "user"
    WORKSPACE = "workspace"
    MEMORY = "memory"


@dataclass(frozen=True)
class ConfigPaths:
    """Host-provided locations used by the orchestrator.

    Attributes:
        user: Path to the user-level settings file (optional)
        home: Home directory; folder files rooted here are refused

    Note:
        A folder file placed in ``~/<dir>/<file>`` would make the whole home
        directory a workspace folder, which shadows every project below it.
    """

    user: Path | None = None
    home: Path = field(default_factory=Path.home)


@dataclass(frozen=True)
class ErrorItem:
    """A parse error found in a configuration file."""

    path: str
    message: str
    line: int = 0
    column: int = 0


@dataclass(frozen=True)
class ConfigurationInspect:
    """Values contributed by each persisted layer for a single key."""

    key: str
    default_value: Any = None
    global_value: Any = None
    workspace_value: Any = None
