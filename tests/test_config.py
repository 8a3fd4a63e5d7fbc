"""Tests for config resolution, settings and discovery."""

from __future__ import annotations

import pytest

from ai_hooks.config import (
    Config,
    ConfigNotFoundError,
    ConfigSettings,
    ConfigValidationError,
    find_config_file,
    get_user_config_file,
    resolve_config,
)
from ai_hooks.hooks.define import hook


async def _noop(ctx, next):
    await next()


def _hook(hook_id: str):
    return hook("before", ["shell:before"], _noop).id(hook_id).build()


class TestResolveConfig:
    def test_merge_order(self):
        a, b, c = _hook("a"), _hook("b"), _hook("c")
        config = Config(hooks=[c], extends=[Config(hooks=[a]), Config(hooks=[b])])

        resolved = resolve_config(config)
        assert [h.id for h in resolved.hooks] == ["a", "b", "c"]
        assert resolved.extends is None

    def test_input_not_mutated(self):
        a, c = _hook("a"), _hook("c")
        preset = Config(hooks=[a])
        config = Config(hooks=[c], extends=[preset])

        resolve_config(config)
        assert [h.id for h in config.hooks] == ["c"]
        assert config.extends == [preset]

    def test_keeps_settings(self):
        settings = ConfigSettings(hook_timeout=10)
        config = Config(hooks=[], settings=settings, extends=[Config(hooks=[_hook("a")])])
        assert resolve_config(config).settings is settings

    def test_nested_presets_flattened(self):
        a, b, c = _hook("a"), _hook("b"), _hook("c")
        inner = Config(hooks=[a])
        outer = Config(hooks=[b], extends=[inner])
        resolved = resolve_config(Config(hooks=[c], extends=[outer]))
        assert [h.id for h in resolved.hooks] == ["a", "b", "c"]

    def test_no_extends_returns_same_config(self):
        config = Config(hooks=[_hook("a")])
        assert resolve_config(config) is config

    def test_empty_extends_returns_same_config(self):
        config = Config(hooks=[_hook("a")], extends=[])
        assert resolve_config(config) is config

    def test_missing_hooks(self):
        with pytest.raises(ConfigValidationError, match="hooks"):
            resolve_config(Config(hooks=None))

    def test_hooks_not_a_list(self):
        with pytest.raises(ConfigValidationError):
            resolve_config(Config(hooks="block-everything"))

    def test_hooks_entries_must_be_definitions(self):
        with pytest.raises(ConfigValidationError, match="dict"):
            resolve_config(Config(hooks=[{"id": "x"}]))

    def test_invalid_preset(self):
        with pytest.raises(ConfigValidationError):
            resolve_config(Config(hooks=[], extends=[{"hooks": []}]))

    def test_invalid_preset_hooks(self):
        with pytest.raises(ConfigValidationError):
            resolve_config(Config(hooks=[], extends=[Config(hooks=None)]))


class TestConfigSettings:
    def test_defaults(self):
        settings = ConfigSettings()
        assert settings.hook_timeout == 5000
        assert settings.fail_mode == "open"
        assert settings.log_level == "warn"
        assert settings.telemetry is False
        assert settings.cwd is None

    def test_from_dict_accepts_both_spellings(self):
        settings = ConfigSettings.from_dict({"hookTimeout": 100, "log_level": "debug"})
        assert settings.hook_timeout == 100
        assert settings.log_level == "debug"

    def test_from_dict_unknown_key(self):
        with pytest.raises(ConfigValidationError, match="Unknown setting"):
            ConfigSettings.from_dict({"retries": 3})

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"fail_mode": "sideways"},
            {"log_level": "loud"},
            {"hook_timeout": 0},
            {"hook_timeout": -5},
            {"hook_timeout": "fast"},
            {"hook_timeout": True},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigValidationError):
            ConfigSettings(**kwargs)

    def test_to_dict(self):
        assert ConfigSettings(fail_mode="closed").to_dict()["fail_mode"] == "closed"


class TestConfigNotFoundError:
    def test_carries_search_path(self, tmp_path):
        err = ConfigNotFoundError(tmp_path)
        assert err.search_path == str(tmp_path)
        assert str(tmp_path) in str(err)


class TestFindConfigFile:
    @pytest.fixture(autouse=True)
    def isolated_env(self, monkeypatch, tmp_path):
        monkeypatch.delenv("AI_HOOKS_CONFIG", raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))

    def test_none_when_missing(self, tmp_path):
        assert find_config_file(tmp_path) is None

    def test_finds_yaml_in_cwd(self, tmp_path):
        (tmp_path / "ai-hooks.yml").write_text("hooks: []\n")
        assert find_config_file(tmp_path) == tmp_path / "ai-hooks.yml"

    def test_prefers_yaml_over_yml(self, tmp_path):
        (tmp_path / "ai-hooks.yml").write_text("hooks: []\n")
        (tmp_path / "ai-hooks.yaml").write_text("hooks: []\n")
        assert find_config_file(tmp_path) == tmp_path / "ai-hooks.yaml"

    def test_env_var_wins(self, tmp_path, monkeypatch):
        (tmp_path / "ai-hooks.yaml").write_text("hooks: []\n")
        custom = tmp_path / "custom.yaml"
        custom.write_text("hooks: []\n")
        monkeypatch.setenv("AI_HOOKS_CONFIG", str(custom))
        assert find_config_file(tmp_path) == custom

    def test_falls_back_to_user_config(self, tmp_path):
        user_file = get_user_config_file()
        user_file.parent.mkdir(parents=True)
        user_file.write_text("hooks: []\n")
        project = tmp_path / "project"
        project.mkdir()
        assert find_config_file(project) == user_file
