"""News portal content management service: configuration, database, migrations and HTTP API."""

__version__ = "0.1.0"

__all__ = ["cli", "config", "db", "model", "response", "server", "system", "utils"]