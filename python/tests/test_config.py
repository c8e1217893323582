"""
Tests for configuration loading and validation.
"""

import logging
from pathlib import Path

import pytest

from api.resources import RESOURCES, configure_resources
from config_manager import ConfigManager, ConfigurationError, get_config


def write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")
    return path


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_bundled_config_loads(self):
        config = ConfigManager(str(Path(__file__).parent.parent / "config.yaml"))

        assert config.api.docs_url == "/api/docs"
        assert config.database.name == "customer_db"
        assert config.logging.level == "INFO"
        assert set(config.ownership.enforced_resources) == {
            "address", "email_contact", "phone_contact", "natural_person", "legal_entity"
        }

    def test_missing_file_uses_defaults(self, tmp_path):
        config = ConfigManager(str(tmp_path / "absent.yaml"))

        assert config.api.title == "Customer Master Data API"
        assert config.database.port == 5432
        assert config.logging.file is None

    def test_partial_file_keeps_defaults(self, tmp_path):
        path = write_config(tmp_path, "database:\n  host: db.internal\nlogging:\n  level: debug\n")

        config = ConfigManager(str(path))

        assert config.database.host == "db.internal"
        assert config.database.port == 5432
        assert config.logging.level == "DEBUG"
        assert config.api.version == "1.0.0"

    def test_config_path_from_environment(self, tmp_path, monkeypatch):
        path = write_config(tmp_path, "api:\n  title: From Env\n")
        monkeypatch.setenv("CONFIG_PATH", str(path))

        assert ConfigManager().api.title == "From Env"

    def test_invalid_yaml(self, tmp_path):
        path = write_config(tmp_path, "api: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            ConfigManager(str(path))

    def test_top_level_must_be_mapping(self, tmp_path):
        path = write_config(tmp_path, "- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            ConfigManager(str(path))

    @pytest.mark.parametrize("content", [
        "logging:\n  level: LOUD\n",
        "database:\n  port: 70000\n",
        "database:\n  pool_size: 0\n",
        "database:\n  max_overflow: -1\n",
        "ownership:\n  enforced_resources: address\n",
        "api: nope\n",
    ])
    def test_invalid_values(self, tmp_path, content):
        with pytest.raises(ConfigurationError):
            ConfigManager(str(write_config(tmp_path, content)))

    def test_to_dict_masks_password(self, tmp_path):
        path = write_config(tmp_path, "database:\n  password: hunter2\n")

        data = ConfigManager(str(path)).to_dict()

        assert data["database"]["password"] == "***"
        assert "hunter2" not in str(data)

    def test_singleton(self, tmp_path):
        path = str(write_config(tmp_path, "api:\n  version: '2.1'\n"))

        first = get_config(path)

        assert get_config() is first
        assert first.api.version == "2.1"
        ConfigManager.reset_instance()
        assert get_config(path) is not first

    def test_configure_logging(self, tmp_path):
        log_file = tmp_path / "logs" / "service.log"
        path = write_config(tmp_path, f"logging:\n  level: WARNING\n  console: false\n  file: '{log_file.as_posix()}'\n")

        root = logging.getLogger()
        previous_level = root.level
        try:
            ConfigManager(str(path)).configure_logging()
            logging.getLogger("tests.config").warning("written to file")
            for handler in root.handlers:
                handler.flush()

            assert root.level == logging.WARNING
            assert "written to file" in log_file.read_text(encoding="utf-8")
        finally:
            for handler in root.handlers[:]:
                handler.close()
                root.removeHandler(handler)
            root.setLevel(previous_level)


class TestOwnershipConfig:
    """Ownership configuration feeds the resource registry."""

    def test_config_applied_to_registry(self, tmp_path):
        path = write_config(tmp_path, "ownership:\n  enforced_resources:\n    - consent\n")
        config = ConfigManager(str(path))

        configure_resources(config.ownership.enforced_resources)

        assert RESOURCES["consent"].enforce_ownership is True
        assert RESOURCES["address"].enforce_ownership is False

    def test_empty_list_disables_checks(self, tmp_path):
        path = write_config(tmp_path, "ownership:\n  enforced_resources: []\n")
        config = ConfigManager(str(path))

        configure_resources(config.ownership.enforced_resources)

        assert not any(r.enforce_ownership for r in RESOURCES.values())
