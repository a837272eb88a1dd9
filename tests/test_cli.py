"""
Tests for the command-line front end.
"""

from pathlib import Path

import pytest

from libcfg.__main__ import main


@pytest.fixture
def config_file(tmp_path: Path, server_text: str) -> Path:
    path = tmp_path / "app.cfg"
    path.write_text(server_text + "\nenabled = true;\n")
    return path


def test_prints_normalized_document(config_file: Path, capsys) -> None:
    assert main([str(config_file)]) == 0

    out = capsys.readouterr().out
    assert out.startswith("server =\n{\n")
    assert '  host = "localhost";\n' in out
    assert out.endswith("enabled = true;\n")


def test_get_scalar(config_file: Path, capsys) -> None:
    assert main([str(config_file), "--get", "server.port"]) == 0
    assert capsys.readouterr().out == "8080\n"

    assert main([str(config_file), "-g", "enabled"]) == 0
    assert capsys.readouterr().out == "true\n"


def test_get_aggregate(config_file: Path, capsys) -> None:
    assert main([str(config_file), "--get", "server.flags"]) == 0
    assert capsys.readouterr().out == "[ 1, 2, 3 ]\n"


def test_get_missing(config_file: Path, capsys) -> None:
    assert main([str(config_file), "--get", "server.missing"]) == 1
    assert "not found" in capsys.readouterr().err


def test_check(config_file: Path, capsys) -> None:
    assert main([str(config_file), "--check"]) == 0
    assert capsys.readouterr().out == f"{config_file}: OK\n"


def test_parse_error(tmp_path: Path, capsys) -> None:
    path = tmp_path / "broken.cfg"
    path.write_text("a = 1;\nb = ;\n")

    assert main([str(path), "--check"]) == 1
    assert f"{path}:2:" in capsys.readouterr().err


def test_missing_file(tmp_path: Path, capsys) -> None:
    assert main([str(tmp_path / "missing.cfg")]) == 1
    assert "Configuration error" in capsys.readouterr().err


def test_tab_width(config_file: Path, capsys) -> None:
    assert main([str(config_file), "--tab-width", "4"]) == 0
    assert "    port = 8080;\n" in capsys.readouterr().out
