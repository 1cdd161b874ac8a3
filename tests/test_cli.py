import json

import pytest
from click.testing import CliRunner

from xcstringsmigrator.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def config_folder(tmp_path) -> str:
    folder = tmp_path / "config"
    folder.mkdir()
    return str(folder)


def test_migrate(runner, tmp_path, make_file, config_folder):
    make_file(tmp_path / "en.lproj" / "Localizable.strings", '"hello" = "Hello";')
    make_file(tmp_path / "ja.lproj" / "Localizable.strings", '"hello" = "こんにちは";')

    result = runner.invoke(
        cli,
        [
            "--config-folder",
            config_folder,
            "migrate",
            "-p",
            str(tmp_path / "en.lproj"),
            "--path",
            str(tmp_path / "ja.lproj"),
            "-o",
            str(tmp_path / "out"),
        ],
    )

    assert result.exit_code == 0, result.output
    assert result.output.strip().endswith("Completed.")
    document = json.loads((tmp_path / "out" / "Localizable.xcstrings").read_text("utf-8"))
    assert document["sourceLanguage"] == "en"
    assert document["strings"]["hello"]["localizations"]["ja"]["stringUnit"]["value"] == "こんにちは"


def test_migrate_verbose_prints_catalog(runner, tmp_path, make_file, config_folder):
    make_file(tmp_path / "en.lproj" / "Main.strings", '"path" = "/";')

    result = runner.invoke(
        cli,
        [
            "--config-folder",
            config_folder,
            "migrate",
            "-l",
            "fr",
            "-p",
            str(tmp_path / "en.lproj"),
            "-o",
            str(tmp_path / "out"),
            "-v",
        ],
    )

    assert result.exit_code == 0, result.output
    assert '"sourceLanguage" : "fr"' in result.output
    assert '"value" : "/"' in result.output


def test_migrate_source_language_from_config(runner, tmp_path, make_file):
    make_file(tmp_path / "config" / "config.yml", "commands:\n  migrate:\n    source_language: ja\n")
    make_file(tmp_path / "ja.lproj" / "Main.strings", '"a" = "あ";')

    result = runner.invoke(
        cli,
        [
            "--config-folder",
            str(tmp_path / "config"),
            "migrate",
            "-p",
            str(tmp_path / "ja.lproj"),
            "-o",
            str(tmp_path / "out"),
        ],
    )

    assert result.exit_code == 0, result.output
    document = json.loads((tmp_path / "out" / "Main.xcstrings").read_text("utf-8"))
    assert document["sourceLanguage"] == "ja"


def test_migrate_without_input_files(runner, tmp_path, config_folder):
    result = runner.invoke(
        cli,
        ["--config-folder", config_folder, "migrate", "-p", str(tmp_path), "-o", str(tmp_path)],
    )

    assert result.exit_code == 1
    assert "error: strings files not found." in result.output


def test_migrate_export_failure(runner, tmp_path, make_file, config_folder):
    make_file(tmp_path / "en.lproj" / "Main.strings", '"a" = "b";')
    blocker = make_file(tmp_path / "blocker", "not a directory")

    result = runner.invoke(
        cli,
        [
            "--config-folder",
            config_folder,
            "migrate",
            "-p",
            str(tmp_path / "en.lproj"),
            "-o",
            str(blocker),
        ],
    )

    assert result.exit_code == 4
    assert "error: failed to export xcstrings file." in result.output


def test_migrate_requires_path(runner, tmp_path, config_folder):
    result = runner.invoke(cli, ["--config-folder", config_folder, "migrate", "-o", str(tmp_path)])
    assert result.exit_code == 2


def test_revert(runner, resources, tmp_path, config_folder):
    result = runner.invoke(
        cli,
        [
            "--config-folder",
            config_folder,
            "revert",
            "-p",
            str(resources / "reverter" / "Localizable.xcstrings"),
            "-o",
            str(tmp_path),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Completed." in result.output
    assert (tmp_path / "en.lproj" / "Localizable.strings").exists()
    assert (tmp_path / "ja.lproj" / "Localizable.stringsdict").exists()


@pytest.mark.parametrize(
    "name, exit_code, message",
    [
        ("not-exist.xcstrings", 2, "error: xcstrings file not found."),
        ("Broken.xcstrings", 3, "error: xcstrings file is broken."),
    ],
)
def test_revert_errors(runner, resources, tmp_path, config_folder, name, exit_code, message):
    result = runner.invoke(
        cli,
        [
            "--config-folder",
            config_folder,
            "revert",
            "-p",
            str(resources / "reverter" / name),
            "-o",
            str(tmp_path),
        ],
    )

    assert result.exit_code == exit_code
    assert message in result.output


def test_invalid_config(runner, tmp_path, make_file):
    make_file(tmp_path / "config" / "config.yml", "logging: [unclosed\n")

    result = runner.invoke(
        cli,
        ["--config-folder", str(tmp_path / "config"), "revert", "-p", "x", "-o", str(tmp_path)],
    )

    assert result.exit_code == 7
    assert "error: invalid configuration file" in result.output
