import pytest
from aiohttp.test_utils import unused_port
from typer.testing import CliRunner

from fetchpool import __version__
from fetchpool.cli import app as cli_app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    config_file = tmp_path / "config" / "config.ini"
    monkeypatch.setattr(cli_app, "CONFIG_FILE", config_file)
    return config_file


def test_version():
    result = runner.invoke(cli_app.app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_init_writes_defaults(isolated_config):
    result = runner.invoke(cli_app.app, ["init"])
    assert result.exit_code == 0
    assert isolated_config.is_file()
    assert "max_workers = 5" in isolated_config.read_text(encoding="utf-8")


def test_init_refuses_to_overwrite_without_confirmation(isolated_config):
    runner.invoke(cli_app.app, ["init"])
    result = runner.invoke(cli_app.app, ["init"], input="n\n")
    assert result.exit_code != 0


def test_show_config_lists_settings():
    result = runner.invoke(cli_app.app, ["--show-config"])
    assert result.exit_code == 0
    assert "max_workers" in result.output


def test_fetch_without_urls_fails():
    result = runner.invoke(cli_app.app, ["fetch"])
    assert result.exit_code == 1
    assert "No URLs provided" in result.output


def test_fetch_blank_input_file_completes(tmp_path):
    url_file = tmp_path / "urls.txt"
    url_file.write_text("\n   \n", encoding="utf-8")

    result = runner.invoke(
        cli_app.app,
        ["fetch", "-i", str(url_file), "-d", str(tmp_path / "downloads")],
    )
    assert result.exit_code == 0
    assert "No URLs were processed" in result.output


def test_fetch_reports_failures_with_exit_code(tmp_path):
    url = f"http://127.0.0.1:{unused_port()}/file.bin"
    result = runner.invoke(
        cli_app.app,
        ["fetch", url, "-d", str(tmp_path / "downloads"), "--timeout", "2"],
    )
    assert result.exit_code == 1
    assert "Fetch Summary" in result.output


def test_invalid_option_is_a_configuration_error(tmp_path):
    result = runner.invoke(
        cli_app.app, ["fetch", "https://host/a.bin", "--workers", "0"]
    )
    assert result.exit_code == 1
    assert "ConfigurationError" in result.output
