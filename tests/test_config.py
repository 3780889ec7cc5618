from __future__ import annotations

from pathlib import Path

import pytest

from pipesmith.core.config import BootstrapConfig, RequestInfo, load_config
from pipesmith.core.exceptions import ConfigurationError
from pipesmith.core.fallback import RenderMode
from pipesmith.core.reducer import UnmatchedPolicy


def test_defaults() -> None:
    config = BootstrapConfig()

    assert config.charset == "utf-8"
    assert config.mode is RenderMode.ASYNC
    assert config.child == "root"
    assert config.name == "bootstrap"
    assert config.marker_attribute == "data-pagelet"
    assert config.unmatched is UnmatchedPolicy.RETRY
    assert config.id != BootstrapConfig().id


def test_unknown_charset_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown charset"):
        BootstrapConfig(charset="not-a-charset")


def test_load_toml_table(tmp_path: Path) -> None:
    path = tmp_path / "pipesmith.toml"
    path.write_text(
        '[pipesmith]\ntitle = "Shop"\nmode = "sync"\nunmatched = "drop"\nlength = 4\n',
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.title == "Shop"
    assert config.mode is RenderMode.SYNC
    assert config.unmatched is UnmatchedPolicy.DROP
    assert config.length == 4


def test_load_yaml_top_level_with_overrides(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("title: Shop\nkeywords: [a, b]\n", encoding="utf-8")

    config = load_config(path, overrides={"title": "Override"})

    assert config.title == "Override"
    assert config.keywords == ["a", "b"]


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")

    assert load_config(path).title == "Pipesmith"


@pytest.mark.parametrize(
    ("name", "content"),
    [
        ("bad.toml", "title = \n"),
        ("list.yml", "- a\n- b\n"),
        ("extra.yml", "colour: red\n"),
        ("table.toml", 'pipesmith = "x"\n'),
    ],
)
def test_invalid_configuration(tmp_path: Path, name: str, content: str) -> None:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config(path)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Failed to read"):
        load_config(tmp_path / "missing.toml")


def test_request_info_from_url() -> None:
    info = RequestInfo.from_url("https://example.com/shop?q=1&tag=a&tag=b")

    assert info.path == "https://example.com/shop"
    assert info.query == {"q": "1", "tag": ["a", "b"]}


def test_request_info_from_relative_url() -> None:
    info = RequestInfo.from_url("/shop")

    assert info.path == "/shop"
    assert info.query == {}


def test_unknown_content_type_charset_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown charset 'bogus' in content type"):
        BootstrapConfig(content_type="text/html; charset=bogus")

    assert BootstrapConfig(content_type="text/html; charset=latin-1").content_type
