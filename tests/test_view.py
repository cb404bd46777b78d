"""Tests for WorkspaceConfiguration views."""

from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
from conftest import write_json
from workspace_config import ConfigPaths
from workspace_config import ConfigurationInspect
from workspace_config import Configurations
from workspace_config import ConfigurationTarget
from workspace_config import WorkspaceConfiguration


class TestWorkspaceConfiguration:
    """Test views returned by get_configuration."""

    @pytest.fixture
    def tmp(self):
        with TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    @pytest.fixture
    def manager(self, tmp, watcher, proxy):
        user = write_json(
            tmp / "user" / "settings.json",
            {"editor.fontSize": 14, "editor.rulers": [80, 120], "theme": "dark"},
        )
        manager = Configurations(
            ConfigPaths(user=user, home=tmp / "home"),
            proxy,
            watcher=watcher,
            defaults_loader=lambda: {"editor": {"fontSize": 12, "tabSize": 4}},
        )
        yield manager
        manager.dispose()

    def add_folder(self, manager, tmp, name, data):
        config_file = write_json(tmp / name / ".app" / "settings.json", data)
        manager.add_folder_file(config_file)
        return config_file

    # ===== Reading =====

    def test_whole_configuration(self, manager):
        view = manager.get_configuration()
        assert isinstance(view, WorkspaceConfiguration)
        assert set(view) == {"editor", "theme"}
        assert view["editor.fontSize"] == 14
        assert view.get("editor.tabSize") == 4
        assert view.has("theme")
        assert not view.has("missing")

    def test_section(self, manager):
        view = manager.get_configuration("editor")
        assert dict(view) == {"fontSize": 14, "tabSize": 4, "rulers": (80, 120)}
        assert view.get("fontSize") == 14
        assert "tabSize" in view
        assert len(view) == 3

    def test_get_default_value(self, manager):
        view = manager.get_configuration("editor")
        assert view.get("wordWrap", "off") == "off"
        assert view.get("wordWrap") is None
        with pytest.raises(KeyError):
            view["wordWrap"]

    def test_missing_section(self, manager):
        view = manager.get_configuration("nothing.here")
        assert len(view) == 0
        assert not view.has("a")
        assert view.get("a", 1) == 1

    def test_scalar_section(self, manager):
        view = manager.get_configuration("theme")
        assert list(view) == []
        assert not view.has("dark")

    def test_view_is_read_only(self, manager):
        view = manager.get_configuration()
        with pytest.raises(AttributeError):
            view.has = None  # type: ignore[method-assign]
        with pytest.raises(TypeError):
            view["editor"]["fontSize"] = 1  # type: ignore[index]
        with pytest.raises(AttributeError):
            view["editor"]["rulers"].append(100)  # type: ignore[attr-defined]
        assert manager.user.contents["editor"]["rulers"] == [80, 120]

    def test_config_keys_do_not_shadow_methods(self, manager):
        manager.update_user_config({"get": 1, "has": 2, "update": 3, "inspect": 4})
        view = manager.get_configuration()

        assert view["get"] == 1
        assert view.get("has") == 2
        assert callable(view.update)
        assert callable(view.inspect)

    def test_snapshot_not_updated(self, manager):
        view = manager.get_configuration("editor")
        manager.update_user_config({"editor.fontSize": 20})

        assert view.get("fontSize") == 14
        assert manager.get_configuration("editor").get("fontSize") == 20

    # ===== Resource Scoping =====

    def test_resource_uses_matching_folder(self, manager, tmp):
        self.add_folder(manager, tmp, "first", {"theme": "light"})
        self.add_folder(manager, tmp, "second", {"theme": "solarized"})

        assert manager.get_configuration().get("theme") == "solarized"
        resource = (tmp / "first" / "main.py").as_uri()
        assert manager.get_configuration(resource=resource).get("theme") == "light"

    def test_resource_without_folder(self, manager, tmp):
        self.add_folder(manager, tmp, "proj", {"theme": "light"})

        outside = (tmp / "elsewhere" / "main.py").as_uri()
        assert manager.get_configuration(resource=outside).get("theme") == "dark"
        assert manager.get_configuration(resource="untitled:Untitled-1").get("theme") == "dark"

    # ===== Inspect =====

    def test_inspect(self, manager, tmp):
        self.add_folder(manager, tmp, "proj", {"editor.fontSize": 16})
        view = manager.get_configuration("editor")

        assert view.inspect("fontSize") == ConfigurationInspect(
            key="editor.fontSize",
            default_value=12,
            global_value=14,
            workspace_value=16,
        )
        assert view.inspect("tabSize").global_value is None

    # ===== Update =====

    def test_update_without_workspace_writes_user(self, manager, proxy):
        view = manager.get_configuration("editor")
        view.update("fontSize", 18)

        assert manager.user.get_value("editor.fontSize") == 18
        assert proxy.calls == [("set", ConfigurationTarget.USER, "editor.fontSize", 18)]

    def test_remove_without_workspace_writes_user(self, manager, proxy):
        """Test removing with no active folder file targets the user layer."""
        manager.get_configuration().update("theme", None)

        assert manager.user.get_value("theme") is None
        assert manager.get_configuration().get("theme") is None
        assert proxy.calls == [("remove", ConfigurationTarget.USER, "theme")]

    def test_update_workspace(self, manager, tmp, proxy):
        config_file = self.add_folder(manager, tmp, "proj", {"theme": "light"})
        manager.get_configuration("editor").update("tabSize", 2)

        assert manager.workspace.get_value("editor.tabSize") == 2
        assert manager.user.get_value("editor.tabSize") is None
        assert manager.folder_configurations[config_file].get_value("editor.tabSize") == 2
        assert proxy.calls == [("set", ConfigurationTarget.WORKSPACE, "editor.tabSize", 2)]

    def test_update_user_with_workspace(self, manager, tmp):
        """Test a user edit shadowed by the workspace changes nothing."""
        self.add_folder(manager, tmp, "proj", {"theme": "light"})
        before = manager.configuration
        events = []
        manager.on_did_change(events.append)

        changed = manager.get_configuration().update("theme", "blue", is_user=True)

        assert changed == set()
        assert events == []
        assert manager.configuration is before
        assert manager.get_configuration().get("theme") == "light"

    def test_update_user_with_workspace_visible_key(self, manager, tmp):
        self.add_folder(manager, tmp, "proj", {"theme": "light"})
        changed = manager.get_configuration().update("editor.wordWrap", "on", is_user=True)

        assert changed == {"editor.wordWrap"}
        assert manager.user.get_value("editor.wordWrap") == "on"
        assert manager.workspace.get_value("editor.wordWrap") is None

    def test_update_fires_change(self, manager):
        events = []
        manager.on_did_change(events.append)

        changed = manager.get_configuration("editor").update("fontSize", 30)

        assert changed == {"editor.fontSize"}
        assert events[0].affects_configuration("editor.fontSize")

    def test_update_not_forwarded_in_test_mode(self, tmp, watcher, proxy):
        manager = Configurations(ConfigPaths(home=tmp), proxy, watcher=watcher, defaults_loader=dict, test_mode=True)
        manager.get_configuration().update("a", 1)

        assert manager.get_configuration().get("a") == 1
        assert proxy.calls == []
