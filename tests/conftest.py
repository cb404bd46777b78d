"""Shared fakes for workspace-config tests."""

import json
from pathlib import Path

import pytest
from workspace_config.events import Disposable
from workspace_config.paths import absolute_path


class FakeWatcher:
    """Records watch requests; tests trigger callbacks explicitly."""

    def __init__(self):
        self.callbacks = {}
        self.disposed = []

    def __call__(self, path, on_change):
        key = absolute_path(path)
        self.callbacks[key] = on_change
        return Disposable(lambda: self.disposed.append(key))

    def trigger(self, path):
        self.callbacks[absolute_path(path)]()


class FakeProxy:
    """Records forwarded updates."""

    def __init__(self):
        self.calls = []

    def set_option(self, target, key, value):
        self.calls.append(("set", target, key, value))

    def remove_option(self, target, key):
        self.calls.append(("remove", target, key))


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    return path


@pytest.fixture
def watcher():
    return FakeWatcher()


@pytest.fixture
def proxy():
    return FakeProxy()
