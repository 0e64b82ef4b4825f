import pytest
from pydantic import ValidationError

from fetchpool.exceptions import ConfigurationError
from fetchpool.models.config import FetchConfig
from fetchpool.storage.config_manager import ConfigManager


def test_defaults():
    config = FetchConfig()
    assert config.max_workers == 5
    assert config.download_dir == "downloads"
    assert config.connect_timeout == 10.0
    assert config.total_timeout == 20.0
    assert config.fallback_extension == "bin"


@pytest.mark.parametrize("workers", [0, 33])
def test_worker_budget_is_bounded(workers):
    with pytest.raises(ValidationError):
        FetchConfig(max_workers=workers)


def test_connect_timeout_cannot_exceed_total():
    with pytest.raises(ValidationError):
        FetchConfig(connect_timeout=30, total_timeout=20)


def test_non_positive_timeout_rejected():
    with pytest.raises(ValidationError):
        FetchConfig(total_timeout=0)


def test_fallback_extension_is_normalized():
    assert FetchConfig(fallback_extension=".mp3").fallback_extension == "mp3"
    with pytest.raises(ValidationError):
        FetchConfig(fallback_extension="tar.gz")


def test_load_without_file_uses_defaults(tmp_path):
    config_file = tmp_path / "fetchpool" / "config.ini"
    config = ConfigManager(config_file).load_config()
    assert config.max_workers == 5
    assert config.config_path == str(config_file.parent)
    assert not config_file.exists()


def test_cli_options_override_file_and_ignore_none(tmp_path):
    config_file = tmp_path / "config.ini"
    manager = ConfigManager(config_file)
    manager.save_new_config({"max_workers": 8, "download_dir": "media"})

    config = ConfigManager(config_file).load_config(
        {"max_workers": 2, "download_dir": None}
    )
    assert config.max_workers == 2
    assert config.download_dir == "media"


def test_save_rejects_invalid_settings(tmp_path):
    with pytest.raises(ConfigurationError):
        ConfigManager(tmp_path / "config.ini").save_new_config({"max_workers": 0})


def test_invalid_file_value_raises_configuration_error(tmp_path):
    config_file = tmp_path / "config.ini"
    config_file.write_text("[DEFAULT]\nmax_workers = lots\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        ConfigManager(config_file).load_config()


def test_out_of_range_file_value_raises_configuration_error(tmp_path):
    config_file = tmp_path / "config.ini"
    config_file.write_text("[DEFAULT]\nmax_workers = 99\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        ConfigManager(config_file).load_config()


def test_missing_keys_are_migrated(tmp_path):
    config_file = tmp_path / "config.ini"
    config_file.write_text("[DEFAULT]\nmax_workers = 3\n", encoding="utf-8")

    config = ConfigManager(config_file).load_config()

    assert config.max_workers == 3
    contents = config_file.read_text(encoding="utf-8")
    assert "total_timeout" in contents
    assert "max_workers = 3" in contents
