"""System endpoints: root greeting, health check and server time."""

import logging
import time

from flask import Flask, jsonify
from sqlalchemy import text
from sqlalchemy.engine import Engine

from newscms.model import SystemHealthResp, SystemTimeResp
from newscms.response import respond_error, respond_success

logger = logging.getLogger(__name__)

ROOT_MESSAGE = "Hello there, I'm News Portal CMS!!!"


class SystemRepository:
    """Low level system checks backed by a database engine."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def db_check(self) -> bool:
        """Ping the database; return True when it answers, raise otherwise."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def current_time(self) -> int:
        """Return the current time as Unix seconds."""
        return int(time.time())


class SystemUsecase:
    """System operations exposed to the HTTP layer."""

    def __init__(self, repo: SystemRepository):
        self.repo = repo

    def get_health(self) -> SystemHealthResp:
        """Report the service health; errors of the database check propagate."""
        return SystemHealthResp(db_online=self.repo.db_check())

    def get_time(self) -> SystemTimeResp:
        return SystemTimeResp(current_time_unix=self.repo.current_time())


def register_system_routes(app: Flask, usecase: SystemUsecase) -> None:
    """Attach the system endpoints to *app*."""

    def root():
        status, resp = respond_success(ROOT_MESSAGE, None)
        return jsonify(resp.to_dict()), status

    def health():
        try:
            resp = usecase.get_health()
        except Exception as exc:
            status, err_resp = respond_error(exc)
            return jsonify(err_resp.to_dict()), status
        return jsonify(resp.to_dict()), 200

    def server_time():
        return jsonify(usecase.get_time().to_dict()), 200

    app.add_url_rule("/", "system_root", root, methods=["GET"])
    app.add_url_rule("/h34l7h", "system_health", health, methods=["GET"])
    app.add_url_rule("/api/v1/server-time", "system_server_time", server_time, methods=["GET"])