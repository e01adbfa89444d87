import threading

import pytest
from sqlalchemy import create_engine

from newscms import config
from newscms.server import create_app, serve


@pytest.fixture
def restore_config():
    saved = config.get()
    yield
    config.set_config(saved)


def test_create_app_registers_system_routes():
    app = create_app(create_engine("sqlite://"))
    paths = {rule.rule for rule in app.url_map.iter_rules()}
    assert {"/", "/h34l7h", "/api/v1/server-time"} <= paths


def test_create_app_health_uses_engine():
    app = create_app(create_engine("sqlite://"))
    resp = app.test_client().get("/h34l7h")
    assert resp.status_code == 200
    assert resp.get_json() == {"db_online": True}


def test_create_app_health_reports_broken_engine(tmp_path, restore_config):
    config.set_config(config.Config())
    app = create_app(create_engine(f"sqlite:///{tmp_path / 'missing' / 'db.sqlite'}"))
    resp = app.test_client().get("/h34l7h")
    assert resp.status_code == 500
    assert resp.get_json()["success"] is False


def test_create_app_unknown_path():
    app = create_app(create_engine("sqlite://"))
    assert app.test_client().get("/nope").status_code == 404


def test_serve_fails_without_database(restore_config):
    cfg = config.Config()
    cfg.database.primary = config.DBServer(host="127.0.0.1", port=1)
    cfg.database.secondary = config.DBServer(host="127.0.0.1", port=1)
    config.set_config(cfg)
    stop = threading.Event()
    stop.set()
    with pytest.raises(ConnectionError, match="failed to connect to db"):
        serve(stop)