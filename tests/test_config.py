import importlib
import os
import sys

import pytest # type: ignore

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from diagram import config


def test_env_int_reads_value(monkeypatch):
    monkeypatch.setenv("DIAGRAM_MAX_ROLES", "3")
    assert config._env_int("DIAGRAM_MAX_ROLES", -1) == 3


def test_env_int_blank_uses_default(monkeypatch):
    monkeypatch.setenv("DIAGRAM_MAX_ROLES", "  ")
    assert config._env_int("DIAGRAM_MAX_ROLES", -1) == -1


def test_env_int_names_the_variable(monkeypatch):
    monkeypatch.setenv("DIAGRAM_MAX_ROLES", "many")
    with pytest.raises(ValueError) as exc:
        config._env_int("DIAGRAM_MAX_ROLES", -1)
    assert "DIAGRAM_MAX_ROLES" in str(exc.value)
    assert "'many'" in str(exc.value)


def test_env_bool(monkeypatch):
    monkeypatch.setenv("DIAGRAM_MERGE_ROLES", "yes")
    assert config._env_bool("DIAGRAM_MERGE_ROLES", False) is True
    monkeypatch.delenv("DIAGRAM_MERGE_ROLES")
    assert config._env_bool("DIAGRAM_MERGE_ROLES", False) is False


def test_module_constants_follow_environment(monkeypatch):
    monkeypatch.setenv("DIAGRAM_MAX_ROLES", "4")
    monkeypatch.setenv("DIAGRAM_MERGE_ROLES", "true")
    try:
        reloaded = importlib.reload(config)
        assert reloaded.MAX_ROLES == 4
        assert reloaded.MERGE_ROLES is True
        assert reloaded.PipelineConfig().max_roles == 4
    finally:
        monkeypatch.delenv("DIAGRAM_MAX_ROLES")
        monkeypatch.delenv("DIAGRAM_MERGE_ROLES")
        importlib.reload(config)
