from pathlib import Path
from typing import Callable
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner
from conftest import GameInstall

from twlauncher.cli.main import cli
from twlauncher.cli.profiles import profile
from twlauncher.models.game_config import GameConfig
from twlauncher.models.settings import Settings
from twlauncher.utils.constants import DEFAULT_CATEGORY
from twlauncher.utils.games import GameInfo


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    setup_logging = MagicMock()
    monkeypatch.setattr("twlauncher.cli.main.setup_logging", setup_logging)
    return setup_logging


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def configured(
    game: GameInfo, game_install: GameInstall, write_pack: Callable[..., Path]
) -> GameInstall:
    """Saved settings pointing at a fake install with a few mods."""
    settings = Settings()
    settings.game_paths[game.key] = str(game_install.game_path)
    settings.secondary_mods_path = str(game_install.secondary_path)
    settings.skip_network_update = True
    settings.save()

    write_pack(game_install.data_path / "a.pack")
    write_pack(game_install.content_path / "111" / "b.pack")
    write_pack(game_install.data_path / "c.pack")
    return game_install


def test_help(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "rescan" in result.output
    assert "profile" in result.output


def test_debug_flag(runner: CliRunner, no_logging_setup: MagicMock) -> None:
    runner.invoke(cli, ["--debug", "games"])
    no_logging_setup.assert_called_with(debug=True)

    runner.invoke(cli, ["games"])
    no_logging_setup.assert_called_with(debug=None)


def test_set_game_path_and_games(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["set-game-path", "attila", str(tmp_path / "Attila")])
    assert result.exit_code == 0

    result = runner.invoke(cli, ["games"])

    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert f"attila\tAttila\t{tmp_path / 'Attila'}" in lines
    assert any(line.startswith("empire\t") and line.endswith("\t-") for line in lines)


def test_unknown_game(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["set-game-path", "arena", str(tmp_path)])
    assert result.exit_code == 1
    assert "Error:" in result.output

    result = runner.invoke(cli, ["rescan", "arena"])
    assert result.exit_code == 1


def test_rescan_enable_and_load_order(
    runner: CliRunner, configured: GameInstall, game: GameInfo
) -> None:
    result = runner.invoke(cli, ["rescan", game.key])
    assert result.exit_code == 0
    assert "3 mods installed" in result.output

    result = runner.invoke(cli, ["enable", game.key, "b.pack", "a.pack"])
    assert result.exit_code == 0

    result = runner.invoke(cli, ["load-order", game.key])
    assert result.exit_code == 0
    assert result.output.splitlines() == ["a.pack", "b.pack"]

    result = runner.invoke(cli, ["load-order", game.key, "--script"])
    assert result.exit_code == 0
    assert result.output.splitlines() == [
        f'add_working_directory "{configured.content_path / "111"}";',
        'mod "a.pack";',
        'mod "b.pack";',
    ]

    result = runner.invoke(cli, ["disable", game.key, "a.pack", "missing.pack"])
    assert result.exit_code == 1
    assert "missing.pack" in result.output


def test_categories(runner: CliRunner, configured: GameInstall, game: GameInfo) -> None:
    runner.invoke(cli, ["rescan", game.key])

    assert runner.invoke(cli, ["create-category", game.key, "Units"]).exit_code == 0
    assert runner.invoke(cli, ["assign", game.key, "Units", "b.pack"]).exit_code == 0
    assert runner.invoke(cli, ["assign", game.key, "Nope", "a.pack"]).exit_code == 1

    result = runner.invoke(cli, ["categories", game.key])

    assert result.exit_code == 0
    assert result.output.splitlines() == [
        "Units",
        "    b.pack",
        DEFAULT_CATEGORY,
        "    a.pack",
        "    c.pack",
    ]

    result = runner.invoke(cli, ["rename-category", game.key, DEFAULT_CATEGORY, "Other"])
    assert result.exit_code == 1


def test_migrate(runner: CliRunner, game: GameInfo) -> None:
    result = runner.invoke(cli, ["migrate", game.key])
    assert result.exit_code == 0
    assert "up to date" in result.output

    GameConfig.file_path(game.key).write_text("{")
    result = runner.invoke(cli, ["migrate", game.key])
    assert result.exit_code == 1


def test_profiles(runner: CliRunner, configured: GameInstall, game: GameInfo) -> None:
    runner.invoke(cli, ["rescan", game.key])
    runner.invoke(cli, ["enable", game.key, "a.pack"])

    assert runner.invoke(cli, ["profile", "save", game.key, "Campaign"]).exit_code == 0

    result = runner.invoke(cli, ["profile", "list", game.key])
    assert result.output.splitlines() == ["Campaign\t1 mods"]

    runner.invoke(cli, ["disable", game.key, "a.pack"])
    assert runner.invoke(cli, ["profile", "load", game.key, "Campaign"]).exit_code == 0
    assert runner.invoke(cli, ["load-order", game.key]).output.splitlines() == ["a.pack"]

    assert runner.invoke(cli, ["profile", "delete", game.key, "Campaign"]).exit_code == 0
    assert runner.invoke(cli, ["profile", "list", game.key]).output == ""


def test_every_command_has_help(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["rename-category", "--help"])
    assert result.exit_code == 0
    assert "Rename a category." in result.output

    for name, command in cli.commands.items():
        assert command.help, name
    for name, command in profile.commands.items():
        assert command.help, name
