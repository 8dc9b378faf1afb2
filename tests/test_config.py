"""Environment configuration (opt-in only)."""

import sys

import pytest

from graphrepr import config, to_source
from graphrepr.errors import ReprDepthError
from graphrepr.formatter import default_max_depth


def _deep_list(n):
    value = []
    for _ in range(n):
        value = [value]
    return value


def test_no_guard_asked_for(monkeypatch):
    monkeypatch.delenv(config.ENV_MAX_DEPTH, raising=False)
    assert config.max_depth() is None


def test_default_guard_follows_recursion_limit(monkeypatch):
    monkeypatch.setattr(sys, "getrecursionlimit", lambda: 1000)
    assert default_max_depth() == 300
    monkeypatch.setattr(sys, "getrecursionlimit", lambda: 4000)
    assert default_max_depth() == 1300


def test_plain_list_past_one_hundred_levels_renders(monkeypatch):
    monkeypatch.delenv(config.ENV_MAX_DEPTH, raising=False)
    value = _deep_list(150)
    out = eval(to_source(value), {})
    for _ in range(150):
        out = out[0]
    assert out == []


def test_env_max_depth(monkeypatch):
    monkeypatch.setenv(config.ENV_MAX_DEPTH, "5")
    assert config.max_depth() == 5
    value = [[[[[[1]]]]]]
    with pytest.raises(ReprDepthError):
        to_source(value)
    # explicit argument wins over the environment
    assert to_source(value, max_depth=50) == "[[[[[[1]]]]]]"


@pytest.mark.parametrize("raw", ["", "  ", "abc", "0", "-3"])
def test_bad_env_max_depth_is_ignored(monkeypatch, raw):
    monkeypatch.setenv(config.ENV_MAX_DEPTH, raw)
    assert config.max_depth() is None


def test_schema_fields_off_by_default(monkeypatch):
    monkeypatch.delenv(config.ENV_ADD_SCHEMA_FIELDS, raising=False)
    assert config.payload_schema_fields("k") == {}


@pytest.mark.parametrize("flag", ["1", "true", "YES", " on "])
def test_schema_fields_enabled(monkeypatch, flag):
    monkeypatch.setenv(config.ENV_ADD_SCHEMA_FIELDS, flag)
    monkeypatch.delenv(config.ENV_SCHEMA_VERSION, raising=False)
    assert config.payload_schema_fields("k") == {
        "kind": "k",
        "schema_version": config.DEFAULT_SCHEMA_VERSION,
    }


def test_schema_version_override(monkeypatch):
    monkeypatch.setenv(config.ENV_ADD_SCHEMA_FIELDS, "1")
    monkeypatch.setenv(config.ENV_SCHEMA_VERSION, "2.1.0")
    assert config.payload_schema_fields("k")["schema_version"] == "2.1.0"
