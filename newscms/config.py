"""Service configuration, read from a Consul key/value entry."""

import os
import re
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import timedelta
from typing import Any, Mapping, Optional

import requests
import yaml


class ConfigError(Exception):
    """Raised when the configuration cannot be read or decoded."""


@dataclass
class AppConfig:
    port: int = 0
    read_timeout: int = 0
    write_timeout: int = 0
    idle_timeout: int = 0
    warn_limit: int = 0
    bulk_limit: int = 0
    request_body_limit: str = ""
    date_format: str = field(default="", metadata={"key": "dateformat"})
    timestamp_format: str = field(default="", metadata={"key": "timestampformat"})
    max_page_size: int = 0
    default_page_size: int = 0
    file_write_dir: str = ""
    disable_500_err_msg_in_response: bool = False
    max_file_size_in_bytes: int = 0
    max_image_file_size_in_bytes: int = 0


@dataclass
class DBServer:
    host: str = ""
    port: int = 0


@dataclass
class DatabaseConfig:
    primary: DBServer = field(default_factory=DBServer)
    secondary: DBServer = field(default_factory=DBServer)
    name: str = ""
    username: str = ""
    password: str = ""
    ssl_mode: str = ""
    max_life_time: timedelta = field(default_factory=timedelta)
    max_idle_conn: int = 0
    max_open_conn: int = 0
    debug: bool = False
    insert_batch_size: int = 0
    max_batch_size: int = 0


@dataclass
class MinioConfig:
    url: str = ""
    bucket: str = ""
    region: str = ""
    access_key: str = ""
    secret_key: str = ""
    secure: bool = False
    expires: timedelta = field(default_factory=timedelta)


@dataclass
class Config:
    app: AppConfig = field(default_factory=AppConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


_state = {"config": Config()}

_BOOL_WORDS = {
    **dict.fromkeys(("1", "t", "T", "TRUE", "true", "True"), True),
    **dict.fromkeys(("0", "f", "F", "FALSE", "false", "False", ""), False),
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_UNITS = {"ns": 1e-9, "us": 1e-6, "µs": 1e-6, "μs": 1e-6, "ms": 1e-3, "s": 1.0, "m": 60.0, "h": 3600.0}


def _to_int(value: Any) -> int:
    if isinstance(value, str):
        return int(value, 0) if value else 0
    if isinstance(value, (bool, int, float)):
        return int(value)
    raise ValueError(f"expected an integer, got {value!r}")


def _to_bool(value: Any) -> bool:
    if isinstance(value, str) and value in _BOOL_WORDS:
        return _BOOL_WORDS[value]
    if isinstance(value, (bool, int, float)):
        return bool(value)
    raise ValueError(f"expected a boolean, got {value!r}")


def _to_str(value: Any) -> str:
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ValueError(f"expected a string, got {value!r}")


def _to_duration(value: Any) -> timedelta:
    """Strings use unit suffixes such as "1h30m"; bare numbers count as seconds."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return timedelta(seconds=value)
    if isinstance(value, str):
        text = value.strip()
        sign = -1 if text.startswith("-") else 1
        text = text[1:] if text[:1] in ("+", "-") else text
        if text == "0":
            return timedelta(0)
        parts = _DURATION_PART.findall(text)
        if text and "".join(num + unit for num, unit in parts) == text:
            return sign * timedelta(seconds=sum(float(num) * _UNITS[unit] for num, unit in parts))
    raise ValueError(f"expected a duration, got {value!r}")


_CONVERTERS = {int: _to_int, bool: _to_bool, str: _to_str, timedelta: _to_duration}


def _decode(cls: type, data: Any, where: str) -> Any:
    if not isinstance(data, Mapping):
        raise ConfigError(f"{where or 'config'}: expected a mapping, got {type(data).__name__}")
    lowered = {str(key).lower(): value for key, value in data.items()}
    values = {}
    for item in fields(cls):
        key = item.metadata.get("key", item.name)
        raw = lowered.get(key.lower())
        if raw is None:
            continue
        path = f"{where}.{key}" if where else key
        try:
            if is_dataclass(item.type):
                values[item.name] = _decode(item.type, raw, path)
            else:
                values[item.name] = _CONVERTERS[item.type](raw)
        except ValueError as exc:
            raise ConfigError(f"cannot decode '{path}': {exc}") from exc
    return cls(**values)


def config_from_mapping(data: Mapping[str, Any]) -> Config:
    """Build a Config from a nested mapping; key matching ignores case."""
    return _decode(Config, data, "")


def fetch_consul_kv(url: str, path: str, token: str) -> bytes:
    """Read the raw value stored under *path* in the Consul key/value store."""
    base = url if "://" in url else f"http://{url}"
    resp = requests.get(
        f"{base.rstrip('/')}/v1/kv/{path.strip('/')}",
        params={"raw": ""},
        headers={"X-Consul-Token": token},
        timeout=10,
    )
    if resp.status_code == 404:
        raise ConfigError(f"no value found at consul key '{path}'")
    if resp.status_code != 200:
        raise ConfigError(f"consul answered with status {resp.status_code}")
    return resp.content


def get() -> Config:
    """Return the configuration currently in use."""
    return _state["config"]


def set_config(cfg: Config) -> None:
    """Replace the configuration currently in use."""
    _state["config"] = cfg


def load(environ: Optional[Mapping[str, str]] = None) -> Config:
    """Load the configuration from Consul as named by the environment."""
    env = os.environ if environ is None else environ
    names = ("CONSUL_URL", "CONSUL_PATH", "CONSUL_HTTP_TOKEN")
    for name in names:
        if not env.get(name, ""):
            raise ConfigError(f"{name} is missing from ENV")
    try:
        data = yaml.safe_load(fetch_consul_kv(*(env[name] for name in names)))
    except (ConfigError, requests.RequestException, yaml.YAMLError) as exc:
        raise ConfigError(f"failed to read remote config: {exc}") from exc
    try:
        cfg = config_from_mapping(data if data is not None else {})
    except ConfigError as exc:
        raise ConfigError(f"failed to unmarshal consul config: {exc}") from exc
    set_config(cfg)
    return cfg