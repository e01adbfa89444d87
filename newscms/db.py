"""Database connection handling and schema migrations."""

import logging
import re
from pathlib import Path
from typing import Dict, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from newscms import config

logger = logging.getLogger(__name__)

_MIGRATION_FILE = re.compile(r"^([0-9]+)_(.*)\.up\.(.*)$")
_TABLE = "schema_migrations"
_engines: Dict[str, Engine] = {}


class MigrationError(Exception):
    """Raised when migrations cannot be applied."""


def build_dsn(cfg: config.DatabaseConfig, server: config.DBServer) -> str:
    """Return a libpq keyword connection string for *server*."""
    return (
        f"host={server.host} port={server.port} sslmode={cfg.ssl_mode} "
        f"user={cfg.username} password={cfg.password} dbname={cfg.name}"
    )


def migration_uri(cfg: config.DatabaseConfig) -> str:
    """Return the postgres URI of the primary server."""
    return (
        f"postgres://{cfg.username}:{cfg.password}@{cfg.primary.host}:"
        f"{cfg.primary.port}/{cfg.name}?sslmode={cfg.ssl_mode}"
    )


def connect(cfg: Optional[config.DatabaseConfig] = None) -> Engine:
    """Open the primary engine and its read replica; safe to call again."""
    if "primary" in _engines:
        logger.info("postgres already initialized")
        return _engines["primary"]
    cfg = cfg if cfg is not None else config.get().database
    options: Dict[str, int] = {}
    if cfg.max_idle_conn:
        options["pool_size"] = cfg.max_idle_conn
    if cfg.max_open_conn:
        options["pool_size"] = min(options.get("pool_size", 5), cfg.max_open_conn)
        options["max_overflow"] = cfg.max_open_conn - options["pool_size"]
    if cfg.max_life_time.total_seconds():
        options["pool_recycle"] = int(cfg.max_life_time.total_seconds())
    try:
        opened = {
            role: create_engine("postgresql://", connect_args={"dsn": build_dsn(cfg, server)}, echo=True, **options)
            for role, server in (("primary", cfg.primary), ("replica", cfg.secondary))
        }
        with opened["primary"].connect():
            pass
    except Exception as exc:
        raise ConnectionError(f"failed to open database connection: {exc}") from exc
    _engines.update(opened)
    return opened["primary"]


def get() -> Optional[Engine]:
    """Return the primary engine, or None before connect()."""
    return _engines.get("primary")


def close() -> None:
    """Dispose of the open engines."""
    if "primary" not in _engines:
        raise RuntimeError("postgres is not connected")
    for engine in _engines.values():
        engine.dispose()
    _engines.clear()


def _read_migrations(path: str) -> Dict[int, Path]:
    directory = Path(path)
    if not directory.is_dir():
        raise MigrationError(f"migration directory {path} does not exist")
    found: Dict[int, Path] = {}
    for entry in sorted(directory.iterdir()):
        match = _MIGRATION_FILE.match(entry.name)
        if match is None:
            continue
        version = int(match.group(1))
        if version in found:
            raise MigrationError(f"duplicate migration file: {entry.name}")
        found[version] = entry
    if not found:
        raise MigrationError(f"no migration files found in {path}")
    return found


def _set_version(engine: Engine, version: int, dirty: bool) -> None:
    with engine.begin() as conn:
        conn.execute(text(f"DELETE FROM {_TABLE}"))
        conn.execute(
            text(f"INSERT INTO {_TABLE} (version, dirty) VALUES (:version, :dirty)"),
            {"version": version, "dirty": dirty},
        )


def _run_script(engine: Engine, sql: str) -> None:
    raw = engine.raw_connection()
    try:
        driver = raw.driver_connection
        if hasattr(driver, "executescript"):
            driver.executescript(sql)
        else:
            raw.cursor().execute(sql)
        raw.commit()
    finally:
        raw.close()


def migrate(uri: str, path: str) -> None:
    """Apply every pending up migration in *path* to the database at *uri*."""
    uri = uri or migration_uri(config.get().database)
    migrations = _read_migrations(path)
    if uri.startswith("postgres://"):
        uri = "postgresql://" + uri[len("postgres://"):]
    try:
        engine = create_engine(uri)
    except Exception as exc:
        raise MigrationError(f"cannot open database: {exc}") from exc
    try:
        with engine.begin() as conn:
            conn.execute(text(
                f"CREATE TABLE IF NOT EXISTS {_TABLE} "
                "(version bigint NOT NULL PRIMARY KEY, dirty boolean NOT NULL)"
            ))
            row = conn.execute(text(f"SELECT version, dirty FROM {_TABLE} LIMIT 1")).first()
        current = None if row is None else int(row[0])
        if row is not None and row[1]:
            raise MigrationError(f"Dirty database version {current}. Fix and force version.")
        pending = sorted(v for v in migrations if current is None or v > current)
        if not pending:
            raise MigrationError("no change")
        for version in pending:
            script = migrations[version]
            _set_version(engine, version, True)
            try:
                _run_script(engine, script.read_text())
            except Exception as exc:
                raise MigrationError(f"migration failed in {script.name}: {exc}") from exc
            _set_version(engine, version, False)
            logger.info("applied migration %s", script.name)
    finally:
        engine.dispose()