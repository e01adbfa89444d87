from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest

from newscms import config

CONSUL_YAML = b"""
app:
  port: "8080"
  disable_500_err_msg_in_response: true
  DateFormat: "2006-01-02"
database:
  primary:
    host: db_primary
    port: 5432
  name: news
  username: user
  ssl_mode: disable
  max_life_time: 300
  max_idle_conn: 4
"""


@pytest.fixture(autouse=True)
def restore_config():
    saved = config.get()
    yield
    config.set_config(saved)


def _env(**overrides):
    env = {
        "CONSUL_URL": "localhost:8500",
        "CONSUL_PATH": "news-portal/cms",
        "CONSUL_HTTP_TOKEN": "token",
    }
    env.update(overrides)
    return env


def test_defaults_are_empty():
    cfg = config.Config()
    assert cfg.app.port == 0
    assert cfg.database.primary == config.DBServer()
    assert cfg.database.max_life_time == timedelta(0)


def test_config_from_mapping_weak_types_and_case():
    cfg = config.config_from_mapping(
        {"App": {"PORT": "8080", "disable_500_err_msg_in_response": "true"},
         "database": {"primary": {"host": "db", "port": 5432}, "debug": 1}}
    )
    assert cfg.app.port == 8080
    assert cfg.app.disable_500_err_msg_in_response is True
    assert cfg.database.primary.host == "db"
    assert cfg.database.primary.port == 5432
    assert cfg.database.debug is True


def test_untagged_fields_use_lowercase_name():
    cfg = config.config_from_mapping({"app": {"dateformat": "2006-01-02"}})
    assert cfg.app.date_format == "2006-01-02"


def test_duration_strings_and_numbers():
    cfg = config.config_from_mapping({"database": {"max_life_time": "1m30s"}})
    assert cfg.database.max_life_time == timedelta(seconds=90)
    cfg = config.config_from_mapping({"database": {"max_life_time": 300}})
    assert cfg.database.max_life_time == timedelta(seconds=300)


def test_bad_values_raise():
    with pytest.raises(config.ConfigError):
        config.config_from_mapping({"app": {"port": "eighty"}})
    with pytest.raises(config.ConfigError):
        config.config_from_mapping({"database": {"max_life_time": "soon"}})
    with pytest.raises(config.ConfigError):
        config.config_from_mapping({"database": "nope"})


def test_set_and_get_round_trip():
    cfg = config.Config(app=config.AppConfig(port=9000))
    config.set_config(cfg)
    assert config.get() is cfg


@pytest.mark.parametrize(
    "missing, message",
    [
        ("CONSUL_URL", "CONSUL_URL is missing from ENV"),
        ("CONSUL_PATH", "CONSUL_PATH is missing from ENV"),
        ("CONSUL_HTTP_TOKEN", "CONSUL_HTTP_TOKEN is missing from ENV"),
    ],
)
def test_load_requires_environment(missing, message):
    env = _env()
    del env[missing]
    with pytest.raises(config.ConfigError) as info:
        config.load(env)
    assert str(info.value) == message


@patch("requests.get")
def test_load_reads_consul(mock_get):
    mock_get.return_value = MagicMock(status_code=200, content=CONSUL_YAML)
    cfg = config.load(_env())
    assert config.get() is cfg
    assert cfg.app.port == 8080
    assert cfg.app.date_format == "2006-01-02"
    assert cfg.database.name == "news"
    assert cfg.database.max_idle_conn == 4
    args, kwargs = mock_get.call_args
    assert args[0] == "http://localhost:8500/v1/kv/news-portal/cms"
    assert kwargs["headers"] == {"X-Consul-Token": "token"}


@patch("requests.get")
def test_load_missing_key(mock_get):
    mock_get.return_value = MagicMock(status_code=404, content=b"")
    with pytest.raises(config.ConfigError) as info:
        config.load(_env())
    assert str(info.value).startswith("failed to read remote config:")


@patch("requests.get")
def test_load_bad_document(mock_get):
    mock_get.return_value = MagicMock(status_code=200, content=b"app: {port: many}")
    with pytest.raises(config.ConfigError) as info:
        config.load(_env())
    assert str(info.value).startswith("failed to unmarshal consul config:")