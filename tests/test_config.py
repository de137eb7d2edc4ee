# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from migration_checker.config import (
    DIRECT_TIMEOUT_MS,
    RENDERER_TIMEOUT_MS,
    ConfigError,
    CrawlerConfig,
    ValidatorConfig,
    build_config,
    load_settings,
)


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"settings{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


def test_crawler_defaults():
    cfg = build_config(CrawlerConfig, {"source_url": "https://example.com"})
    assert cfg.source_url == "https://example.com/"
    assert cfg.max_depth == 10
    assert cfg.concurrency == 5
    assert cfg.timeout == DIRECT_TIMEOUT_MS
    assert cfg.delay == 100
    assert cfg.exclude_patterns == []
    assert cfg.renderer == "static"


def test_renderer_gets_longer_default_timeout():
    cfg = build_config(CrawlerConfig, {"source_url": "https://example.com", "renderer": "flaresolverr"})
    assert cfg.timeout == RENDERER_TIMEOUT_MS
    explicit = build_config(
        CrawlerConfig,
        {"source_url": "https://example.com", "renderer": "flaresolverr", "timeout": 0},
    )
    assert explicit.timeout == 0


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_depth": -1},
        {"max_depth": "abc"},
        {"max_depth": True},
        {"max_depth": "3"},
        {"max_depth": 2.0},
        {"concurrency": False},
        {"concurrency": 0},
        {"timeout": True},
        {"delay": True},
        {"timeout": -5},
        {"delay": -1},
        {"source_url": "ftp://example.com"},
        {"source_url": "example.com"},
        {"exclude_patterns": ["("]},
        {"renderer": "chrome"},
        {"flaresolverr_url": "localhost:8191"},
        {"unknown_option": 1},
    ],
)
def test_crawler_rejects_invalid_values(overrides):
    data = {"source_url": "https://example.com", **overrides}
    with pytest.raises(ConfigError):
        build_config(CrawlerConfig, data)


def test_config_error_is_a_value_error():
    assert issubclass(ConfigError, ValueError)


def test_camel_case_aliases_and_dump():
    cfg = build_config(
        CrawlerConfig,
        {"sourceUrl": "https://example.com/blog", "maxDepth": 2, "excludePatterns": ["/tag/"]},
    )
    assert cfg.max_depth == 2
    dumped = cfg.to_json_dict()
    assert dumped["sourceUrl"] == "https://example.com/blog"
    assert dumped["maxDepth"] == 2
    assert dumped["excludePatterns"] == ["/tag/"]
    assert "max_depth" not in dumped


def test_validator_config():
    cfg = build_config(
        ValidatorConfig,
        {"input_path": "crawl.json", "destination_url": "https://new.example.com/"},
    )
    assert cfg.destination_url == "https://new.example.com"
    assert cfg.redirect_handling == "warning"

    with pytest.raises(ConfigError):
        build_config(ValidatorConfig, {"input_path": "c.json", "destination_url": "nope"})
    with pytest.raises(ConfigError):
        build_config(
            ValidatorConfig,
            {"input_path": "c.json", "destination_url": "https://x.org", "redirect_handling": "error"},
        )


def test_configs_are_frozen():
    cfg = build_config(CrawlerConfig, {"source_url": "https://example.com"})
    with pytest.raises(ValidationError):
        cfg.max_depth = 3


@pytest.mark.parametrize(
    "content,suffix",
    [
        ("crawl:\n  sourceUrl: https://example.com\n  maxDepth: 3\n", ".yaml"),
        (json.dumps({"crawl": {"sourceUrl": "https://example.com", "maxDepth": 3}}), ".json"),
    ],
)
def test_load_settings(tmp_path, content, suffix):
    settings = load_settings(write_file(tmp_path, content, suffix))
    assert settings["crawl"]["maxDepth"] == 3


def test_load_settings_empty_file(tmp_path):
    assert load_settings(write_file(tmp_path, "", ".yml")) == {}


@pytest.mark.parametrize(
    "content,suffix",
    [
        ("crawl: [unclosed", ".yaml"),
        ("- just\n- a list\n", ".yaml"),
        ("{not json", ".json"),
        ("crawl: 5\n", ".yaml"),
        ("crawl = 1", ".toml"),
    ],
)
def test_load_settings_errors(tmp_path, content, suffix):
    with pytest.raises(ConfigError):
        load_settings(write_file(tmp_path, content, suffix))


def test_load_settings_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "absent.yaml")
