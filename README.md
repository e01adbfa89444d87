# newscms

The content management service of a news portal. It reads its
configuration from a Consul key/value entry, opens a PostgreSQL primary
and read replica through SQLAlchemy, applies schema migrations and
serves a small HTTP API built with Flask.

## Installation

```
pip install .
```

Connecting to PostgreSQL needs the database driver that SQLAlchemy uses
for `postgresql://` URLs (psycopg2). It is not installed with the
package; install it alongside.

## Configuration

Three environment variables tell the service where its configuration
lives. Every command reads them on start-up and exits with status 1,
logging `<NAME> is missing from ENV`, if any of them is missing or empty.

| Variable            | Meaning                                                   |
|---------------------|-----------------------------------------------------------|
| `CONSUL_URL`        | address of the Consul agent, e.g. `localhost:8500`; `http://` is added when no scheme is given |
| `CONSUL_PATH`       | key holding the YAML configuration                        |
| `CONSUL_HTTP_TOKEN` | Consul ACL token, sent as `X-Consul-Token`                |

The value stored under `CONSUL_PATH` is a YAML document such as:

```yaml
app:
  port: 8080
  max_page_size: 100
  default_page_size: 20
  disable_500_err_msg_in_response: true

database:
  primary:
    host: localhost
    port: 5432
  secondary:
    host: localhost
    port: 5433
  name: news_portal
  username: user
  password: password
  ssl_mode: disable
  max_life_time: 300
  max_idle_conn: 5
  max_open_conn: 20
  debug: false
```

Keys are matched without regard to case; keys that are absent keep
their zero default. Integers, booleans (`true`, `false`, `1`, `0`, `t`,
`f`, ...) and strings are converted as needed. `max_life_time` takes a
number of seconds or a duration string such as `90s`, `5m` or `1h30m`.
A value that cannot be converted raises `newscms.config.ConfigError`
naming the offending key.

When `disable_500_err_msg_in_response` is set, errors answered with
status 500 carry only the message `internal server error`; the full
error is still logged.

## Commands

Run the HTTP server:

```
newscms serve
```

It connects to the database, listens on `0.0.0.0` at `app.port` and
stops on the first SIGINT or SIGTERM, waiting up to five seconds for the
server to shut down and then closing the database connections. A second
signal ends the process at once with status 1. Errors while serving are
logged.

Apply pending migrations:

```
newscms migrate --path /db/migrations
```

`--path` defaults to `/db/migrations`. `--uri` takes a database URI
(`postgres://` is accepted and read as `postgresql://`); without it the
URI is built from the `database` section of the configuration, using
the primary server. Migration files are named
`<version>_<name>.up.<ext>` and are applied in version order. The
applied version is kept in a `schema_migrations` table together with a
`dirty` flag that stays set if a migration fails; a dirty database is
refused until it is fixed by hand. When nothing is pending the command
reports `no change` and exits with status 1, as it does on any other
migration error.

Without a command, the help text is printed. Logging is at DEBUG level,
and the database engines echo the SQL they run.

## HTTP API

| Method | Path                  | Answer                                             |
|--------|-----------------------|----------------------------------------------------|
| GET    | `/`                   | `{"success": true, "message": "Hello there, I'm News Portal CMS!!!"}` |
| GET    | `/h34l7h`             | `{"db_online": true}` when the database answers `SELECT 1`; otherwise an error envelope with status 500 |
| GET    | `/api/v1/server-time` | `{"current_time_unix": <seconds since the epoch>}` |

## Using it as a library

```python
from sqlalchemy import create_engine

from newscms import config, server

config.set_config(config.config_from_mapping({"app": {"port": 8080}}))
app = server.create_app(create_engine("sqlite://"))
client = app.test_client()
print(client.get("/h34l7h").get_json())   # {'db_online': True}
```

- `newscms.config`: `load()` reads the configuration from Consul and
  makes it current; `get()` and `set_config()` read and replace the
  current `Config` (with `app` and `database` sections).
- `newscms.db`: `connect()`, `get()`, `close()` manage the primary and
  replica engines; `migrate(uri, path)` applies migrations;
  `build_dsn()` and `migration_uri()` build connection strings.
- `newscms.response`: every helper returns a `(status, Response)` pair.
  `Response.to_dict()` gives the JSON envelope — `success`, `message`,
  optional `hash`, paging fields (`count`, `page_size`, `previous_page`,
  `next_page`, `current_page`) and `data` — leaving out an empty message
  and unset fields. `respond_success_for_list` fills in the previous
  page when the current page is above 1 and the next page when `count`
  exceeds `page_size * cur_page`. `respond_error` maps `APIError` and
  `WrapErr` (also when found as the cause of another exception) to their
  status codes, and anything else to 500.
- `newscms.system`: `SystemRepository`, `SystemUsecase` and
  `register_system_routes(app, usecase)` behind the endpoints above.
- `newscms.utils.setup_signal_handler()`: returns a `threading.Event`
  set on the first SIGINT or SIGTERM; it may be called only once.

## What it does not do

The service has no content endpoints yet: there are no routes or
storage for articles, categories or users, only the system endpoints
listed above. The `MinioConfig` settings are defined but nothing uses
them, so there is no file or image storage. Migrations only go up;
there is no command to roll back or force a version.