"""HTTP server assembly and lifecycle."""

import logging
import threading

from flask import Flask
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.serving import make_server

from newscms import config, db
from newscms.system import SystemRepository, SystemUsecase, register_system_routes

logger = logging.getLogger(__name__)

_SHUTDOWN_TIMEOUT = 5.0


def create_app(engine: Engine) -> Flask:
    """Build the web application wired to *engine*."""
    app = Flask("newscms")
    repo = SystemRepository(engine)
    usecase = SystemUsecase(repo)
    register_system_routes(app, usecase)
    return app


def serve(stop_event: threading.Event) -> None:
    """Connect to the database, serve HTTP until *stop_event* is set, then shut down."""
    try:
        engine = db.connect()
    except ConnectionError as exc:
        raise ConnectionError(f"failed to connect to db: {exc}") from exc

    app = create_app(engine)
    server = make_server("0.0.0.0", config.get().app.port, app, threaded=True)
    worker = threading.Thread(target=server.serve_forever, daemon=True)
    worker.start()

    while not stop_event.wait(0.5):
        pass
    logger.info("shutting down server...")

    stopper = threading.Thread(target=server.shutdown, daemon=True)
    stopper.start()
    stopper.join(_SHUTDOWN_TIMEOUT)
    server.server_close()
    logger.info("server shutdowns gracefully")

    try:
        db.close()
    except (RuntimeError, SQLAlchemyError) as exc:
        raise RuntimeError(f"failed to close db connection: {exc}") from exc