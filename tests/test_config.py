"""
Tests for the Config facade: reading, writing, lookups and includes.
"""

import io
from pathlib import Path

import pytest

from libcfg.config import Config
from libcfg.errors import FileIOError, SettingNotFoundError
from libcfg.options import ConfigOptions
from libcfg.syntax.lexer import LexerError
from libcfg.syntax.parser import ParseError
from libcfg.tree.setting import SettingType


def test_load_example_config(example_config_path: Path) -> None:
    """Test that example config loads without errors."""
    config = Config()
    config.read_file(example_config_path)

    assert config.filename == str(example_config_path)
    assert config.lookup("application.name").value == "Example application"
    assert config.lookup_value("application.window.pos.x", int) == 350


def test_lookup_end_to_end(server_config: Config) -> None:
    assert config_value(server_config, "server.port") == 8080
    assert config_value(server_config, "server.flags[2]") == 3

    with pytest.raises(SettingNotFoundError):
        server_config.lookup("server.missing")


def config_value(config: Config, path: str):
    return config.lookup(path).value


def test_exists_and_item_access(server_config: Config) -> None:
    assert server_config.exists("server.host")
    assert "server.flags[0]" in server_config
    assert "server.flags[3]" not in server_config
    assert server_config["server.host"].value == "localhost"


def test_lookup_value(server_config: Config) -> None:
    assert server_config.lookup_value("server.port", int) == 8080
    assert server_config.lookup_value("server.port", float, 1.5) == 1.5
    assert server_config.lookup_value("server.missing", str, "dflt") == "dflt"
    assert server_config.lookup_value("server.missing") is None


def test_auto_convert_option(server_text: str) -> None:
    config = Config(ConfigOptions(auto_convert=True))
    config.read_string(server_text)

    assert config.lookup_value("server.port", float) == 8080.0
    assert config.lookup_value("server.host", int, -1) == -1


def test_modify_and_write(server_config: Config) -> None:
    server_config.lookup("server.port").value = 9090
    server_config.root["server"].add(SettingType.BOOLEAN, "tls").value = True

    reread = Config()
    reread.read_string(server_config.write_string())

    assert reread.lookup_value("server.port", int) == 9090
    assert reread.lookup_value("server.tls", bool) is True
    assert reread.root == server_config.root


def test_failed_read_keeps_previous_tree(server_config: Config) -> None:
    before = server_config.write_string()

    with pytest.raises(ParseError):
        server_config.read_string("server = { port = ; };")
    with pytest.raises(LexerError):
        server_config.read_string('server = "unterminated')

    assert server_config.write_string() == before
    assert server_config.lookup_value("server.port", int) == 8080


def test_read_replaces_tree(server_config: Config) -> None:
    server_config.read_string("other = 1;")

    assert not server_config.exists("server")
    assert server_config.lookup_value("other", int) == 1


def test_read_from_stream_and_bytes() -> None:
    config = Config()
    config.read(io.StringIO("a = 1;"))
    assert config.lookup_value("a", int) == 1

    config.read_string('b = "é";'.encode("utf-8"))
    assert config.lookup_value("b", str) == "é"


def test_bytes_that_are_not_utf8(server_config: Config) -> None:
    with pytest.raises(FileIOError) as exc_info:
        server_config.read_string(b'a = "\xff";', "broken.cfg")

    assert exc_info.value.filename == "broken.cfg"
    assert server_config.exists("server.port")


def test_write_to_stream(server_config: Config) -> None:
    buffer = io.StringIO()
    server_config.write(buffer)

    assert buffer.getvalue() == server_config.write_string()
    assert "port = 8080;" in buffer.getvalue()


def test_file_round_trip(tmp_path: Path, server_config: Config) -> None:
    path = tmp_path / "app.cfg"
    server_config.write_file(path)

    config = Config()
    config.read_file(path)

    assert config.root == server_config.root
    assert config.filename == str(path)
    assert config.lookup("server.port").source_file == str(path)


def test_missing_file(tmp_path: Path) -> None:
    config = Config()

    with pytest.raises(FileIOError) as exc_info:
        config.read_file(tmp_path / "missing.cfg")

    assert exc_info.value.filename == str(tmp_path / "missing.cfg")


def test_write_to_missing_directory(tmp_path: Path, server_config: Config) -> None:
    with pytest.raises(FileIOError):
        server_config.write_file(tmp_path / "no" / "such" / "dir.cfg")


def test_clear(server_config: Config) -> None:
    server_config.clear()

    assert len(server_config.root) == 0
    assert server_config.root.type == SettingType.GROUP
    assert server_config.filename is None


def test_to_python(server_config: Config) -> None:
    assert server_config.to_python() == {
        "server": {"port": 8080, "host": "localhost", "flags": [1, 2, 3]}
    }


def test_include_relative_to_including_file(tmp_path: Path) -> None:
    (tmp_path / "extra.cfg").write_text("b = 2;\nnested = { c = 3; };\n")
    main = tmp_path / "main.cfg"
    main.write_text('a = 1;\ng = {\n  @include "extra.cfg"\n  d = 4;\n};\n')

    config = Config()
    config.read_file(main)

    assert config.to_python() == {"a": 1, "g": {"b": 2, "nested": {"c": 3}, "d": 4}}
    assert config.lookup("g.b").source_file == str(tmp_path / "extra.cfg")


def test_include_dir_option(tmp_path: Path) -> None:
    conf_d = tmp_path / "conf.d"
    conf_d.mkdir()
    (conf_d / "10-first.cfg").write_text("first = 1;")
    (conf_d / "20-second.cfg").write_text("second = 2;")

    config = Config()
    config.include_dir = tmp_path
    config.read_string('@include "conf.d/*.cfg"\nlast = 3;')

    assert [setting.name for setting in config.root] == ["first", "second", "last"]


def test_glob_without_matches_includes_nothing(tmp_path: Path) -> None:
    config = Config(ConfigOptions(include_dir=tmp_path))
    config.read_string('@include "*.none"\na = 1;')

    assert config.to_python() == {"a": 1}


def test_missing_include_file(tmp_path: Path) -> None:
    config = Config(ConfigOptions(include_dir=tmp_path))

    with pytest.raises(ParseError) as exc_info:
        config.read_string('a = 1;\n@include "absent.cfg"')

    assert exc_info.value.line == 2


def test_circular_include(tmp_path: Path) -> None:
    (tmp_path / "a.cfg").write_text('@include "b.cfg"')
    (tmp_path / "b.cfg").write_text('@include "a.cfg"')

    config = Config()

    with pytest.raises(ParseError):
        config.read_file(tmp_path / "a.cfg")


def test_duplicate_across_include(tmp_path: Path) -> None:
    (tmp_path / "extra.cfg").write_text("a = 2;")
    main = tmp_path / "main.cfg"
    main.write_text('a = 1;\n@include "extra.cfg"')

    with pytest.raises(ParseError) as exc_info:
        Config().read_file(main)

    assert exc_info.value.filename == str(tmp_path / "extra.cfg")


def test_allow_overrides_option(tmp_path: Path) -> None:
    (tmp_path / "local.cfg").write_text("port = 9000;")
    main = tmp_path / "main.cfg"
    main.write_text('port = 80;\nhost = "h";\n@include "local.cfg"')

    config = Config(ConfigOptions(allow_overrides=True))
    config.read_file(main)

    assert config.lookup_value("port", int) == 9000
