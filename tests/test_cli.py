"""
Tests for the command line entry point
"""
from pathlib import Path

import pytest

from worksheet_mirror.cli import main


@pytest.fixture
def analysis_file(tmp_path: Path, analysis_text) -> Path:
    path = tmp_path / "analysis.txt"
    path.write_text(analysis_text, encoding="utf-8")
    return path


def test_cli_mirror_build(tmp_path: Path, analysis_file, capsys):
    # Act
    code = main(["mirror", str(analysis_file), "--output-dir", str(tmp_path / "out"), "--scale", "1", "--png"])

    # Assert
    assert code == 0
    out = capsys.readouterr().out
    assert "Wrote 2 page(s)" in out
    assert "page-mirrored.png" in out


def test_cli_topic_build(tmp_path: Path, problems_text, capsys):
    path = tmp_path / "problems.txt"
    path.write_text(problems_text, encoding="utf-8")

    code = main(["topic", str(path), "--count", "2", "--word-percent", "50",
                 "--output-dir", str(tmp_path), "--scale", "1"])

    assert code == 0
    assert "Wrote 1 page(s)" in capsys.readouterr().out


def test_cli_missing_input_returns_error(tmp_path: Path):
    assert main(["mirror", str(tmp_path / "nope.txt"), "--output-dir", str(tmp_path)]) == 1


def test_cli_invalid_percent_exits(tmp_path: Path, analysis_file):
    with pytest.raises(SystemExit) as exc:
        main(["topic", str(analysis_file), "--word-percent", "150"])
    assert exc.value.code == 2


def test_cli_no_pages_exits(analysis_file):
    with pytest.raises(SystemExit) as exc:
        main(["mirror", str(analysis_file), "--no-original", "--no-mirrored"])
    assert exc.value.code == 2


def test_cli_requires_mode():
    with pytest.raises(SystemExit):
        main([])
