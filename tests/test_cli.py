"""Tests for the partitions command line, run through click's CliRunner."""

import subprocess
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from partitions import __version__, cli, lilypond_compiler
from partitions.cli import main


@pytest.fixture
def music(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    root = tmp_path / "music"
    for relative in (
        "marches/Valse/a4/saxophone_alto_I_ut.ly",
        "marches/Valse/a4/trombone_II_sib_clef_fa.ly",
        "marches/Valse/carnet/caisse_claire.ly",
        "concerts/Bolero/a4/flute_I_ut.ly",
    ):
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")
    return root


@pytest.fixture
def commands(monkeypatch: pytest.MonkeyPatch) -> list[list[str]]:
    seen: list[list[str]] = []

    def fake_run(command: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        seen.append(command)
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")

    monkeypatch.setattr(lilypond_compiler.subprocess, "run", fake_run)
    return seen


def test_version() -> None:
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_lilypond_compiles_every_sheet(music: Path, commands: list[list[str]]) -> None:
    result = CliRunner().invoke(main, ["lilypond"])
    assert result.exit_code == 0, result.output
    assert len(commands) == 4
    assert "Valse - trombone sib II (Clef de Fa) [a4]: exit status: 0" in result.output
    assert "Valse - caisse_claire [carnet]: exit status: 0" in result.output


def test_lilypond_filters(music: Path, commands: list[list[str]]) -> None:
    result = CliRunner().invoke(main, ["lilypond", "-t", "Valse", "-f", "a4", "-c", "clef_fa"])
    assert result.exit_code == 0, result.output
    assert [command[-1] for command in commands] == [
        "music/marches/Valse/a4/trombone_II_sib_clef_fa.ly"
    ]


def test_lilypond_voice_and_tone(music: Path, commands: list[list[str]]) -> None:
    result = CliRunner().invoke(main, ["lilypond", "-v", "I", "-o", "ut", "-i", "flute"])
    assert result.exit_code == 0, result.output
    assert [Path(command[-1]).name for command in commands] == ["flute_I_ut.ly"]


def test_lilypond_limit(music: Path, commands: list[list[str]]) -> None:
    result = CliRunner().invoke(main, ["lilypond", "--limit", "1"])
    assert result.exit_code == 0, result.output
    assert [command[-1] for command in commands] == ["music/concerts/Bolero/a4/flute_I_ut.ly"]


def test_lilypond_passes_options_to_compile_sheets(
    music: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: list[tuple[Any, ...]] = []

    def fake_compile_sheets(sheets: Any, limit: Any = None, **kwargs: Any) -> list[Any]:
        calls.append((len(sheets), limit, kwargs))
        return []

    monkeypatch.setattr(cli, "compile_sheets", fake_compile_sheets)
    result = CliRunner().invoke(
        main, ["lilypond", "-l", "2", "-j", "3", "--lilypond", "/opt/lilypond"]
    )

    assert result.exit_code == 0, result.output
    assert calls == [(4, 2, {"lilypond": "/opt/lilypond", "jobs": 3})]


def test_lilypond_engine_from_env(music: Path, commands: list[list[str]]) -> None:
    result = CliRunner().invoke(
        main, ["lilypond", "-l", "1"], env={"PARTITIONS_LILYPOND": "/nix/bin/lilypond"}
    )
    assert result.exit_code == 0, result.output
    assert commands[0][0] == "/nix/bin/lilypond"


def test_lilypond_rejects_unknown_instrument(music: Path, commands: list[list[str]]) -> None:
    result = CliRunner().invoke(main, ["lilypond", "-i", "banjo"])
    assert result.exit_code == 2
    assert commands == []


def test_lilypond_rejects_zero_limit(music: Path, commands: list[list[str]]) -> None:
    result = CliRunner().invoke(main, ["lilypond", "--limit", "0"])
    assert result.exit_code == 2


def test_lilypond_no_match(music: Path, commands: list[list[str]]) -> None:
    result = CliRunner().invoke(main, ["lilypond", "-t", "Nocturne"])
    assert result.exit_code == 0
    assert "No music sheet matches" in result.output
    assert commands == []


def test_lilypond_missing_music_path(tmp_path: Path, commands: list[list[str]]) -> None:
    result = CliRunner().invoke(main, ["lilypond", "-m", str(tmp_path / "absent")])
    assert result.exit_code == 1
    assert "ERROR" in result.output
