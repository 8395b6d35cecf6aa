import pytest
from keyring.backends import fail
from keyring.errors import KeyringError

from spam_protection.api.query import DEFAULT_API_URL
from spam_protection.config import APP_NAME, KEYRING_USER, Config, ConfigError, PolicyConfig


class TestConfigPaths:
    def test_respects_xdg_config_home(self, isolated_config):
        assert Config.config_file_path() == isolated_config / "config.toml"

    def test_default_location(self, monkeypatch, tmp_path):
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert Config.config_file_path() == tmp_path / ".config" / "spam-protection" / "config.toml"


class TestLoadSave:
    def test_missing_file_gives_defaults(self, isolated_config):
        config = Config.load()
        assert config.api.base_url == DEFAULT_API_URL
        assert config.policy.frequency_threshold == 1
        assert config.policy.confidence_threshold is None
        assert config.policy.allow_tor_nodes is False

    def test_round_trip(self, isolated_config):
        config = Config()
        config.api.timeout = 4.0
        config.policy = PolicyConfig(frequency_threshold=5, confidence_threshold=70.0, allow_tor_nodes=True)
        config.save()

        loaded = Config.load()
        assert loaded.api.timeout == 4.0
        assert loaded.policy.frequency_threshold == 5
        assert loaded.policy.confidence_threshold == 70.0
        assert loaded.policy.allow_tor_nodes is True

    def test_unset_confidence_not_written(self, isolated_config):
        Config().save()
        text = Config.config_file_path().read_text()
        assert "confidence_threshold" not in text
        assert "frequency_threshold = 1" in text

    def test_explicit_path(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text('[policy]\nfrequency_threshold = 10\n')
        assert Config.load(path).policy.frequency_threshold == 10

    def test_invalid_toml(self, isolated_config):
        isolated_config.mkdir(parents=True)
        (isolated_config / "config.toml").write_text("[policy\nthreshold = ")
        with pytest.raises(ConfigError, match="Invalid config file"):
            Config.load()

    @pytest.mark.parametrize(
        "body",
        [
            "[policy]\nfrequency_threshold = 0\n",
            "[policy]\nconfidence_threshold = 150.0\n",
            '[policy]\nallow_tor_nodes = "no"\n',
            "[api]\ntimeout = -1\n",
            '[api]\ntimeout = "fast"\n',
            'api = "x"\n',
            "policy = 3\n",
            "[api]\nbase_url = 42\n",
            '[api]\nreport_url = ""\n',
        ],
    )
    def test_invalid_values(self, tmp_path, body):
        path = tmp_path / "config.toml"
        path.write_text(body)
        with pytest.raises(ConfigError):
            Config.load(path)


class TestToOptions:
    def test_builds_client_options(self):
        config = Config()
        config.policy.frequency_threshold = 3
        config.policy.confidence_threshold = 40.0
        config.api.timeout = 2.0

        options = config.to_options(api_key="abc")

        assert options.policy.frequency_threshold == 3
        assert options.policy.confidence_threshold == 40.0
        assert options.timeout == 2.0
        assert options.api_key == "abc"
        assert options.allow_tor_nodes is False


class TestApiKey:
    def test_save_and_load(self, fake_keyring):
        assert Config.load_api_key() is None

        Config.save_api_key("k3y")

        assert fake_keyring[(APP_NAME, KEYRING_USER)] == "k3y"
        assert Config.load_api_key() == "k3y"

    def test_refuses_empty_key(self, fake_keyring):
        with pytest.raises(ConfigError):
            Config.save_api_key("")
        assert fake_keyring == {}


class TestKeyringUnavailable:
    @pytest.fixture(autouse=True)
    def no_keyring(self, monkeypatch):
        backend = fail.Keyring()
        monkeypatch.setattr("keyring.get_password", backend.get_password)
        monkeypatch.setattr("keyring.set_password", backend.set_password)

    def test_load_raises_config_error(self):
        with pytest.raises(ConfigError, match="keyring") as exc_info:
            Config.load_api_key()
        assert isinstance(exc_info.value.__cause__, KeyringError)

    def test_save_raises_config_error(self):
        with pytest.raises(ConfigError, match="keyring"):
            Config.save_api_key("k3y")
