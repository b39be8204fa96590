"""Database engine helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from sqlalchemy import create_engine as sa_create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

DEFAULT_SQLITE_URL = "sqlite+pysqlite:///:memory:"


def create_engine(
    connection_string: str | None = None,
    *,
    sqlite_path: str | Path | None = None,
    echo: bool = False,
    connect_args: Mapping[str, Any] | None = None,
) -> Engine:
    """Create a SQLAlchemy engine backing the document store.

    Parameters
    ----------
    connection_string:
        Full SQLAlchemy URL. Takes precedence over ``sqlite_path``.
    sqlite_path:
        Filesystem path to a SQLite database file. Expanded to an absolute path.
    echo:
        Enable SQLAlchemy engine echo logging.
    connect_args:
        Optional mapping passed through to ``sqlalchemy.create_engine``.

    Notes
    -----
    - When neither ``connection_string`` nor ``sqlite_path`` are provided, an
      in-memory SQLite URL is used. Its single connection is shared across
      threads so every session sees the same database.
    - File-backed SQLite engines are opened with ``check_same_thread`` disabled
      so a single engine can serve a threaded web server.
    """
    if connection_string and sqlite_path is not None:
        raise ValueError("Provide either 'connection_string' or 'sqlite_path', not both.")

    args = dict(connect_args or {})
    engine_kwargs: dict[str, Any] = {}
    if connection_string:
        url = connection_string
    elif sqlite_path is not None:
        db_path = Path(sqlite_path).expanduser().resolve()
        url = f"sqlite+pysqlite:///{db_path.as_posix()}"
        args.setdefault("check_same_thread", False)
    else:
        url = DEFAULT_SQLITE_URL
        args.setdefault("check_same_thread", False)
        engine_kwargs["poolclass"] = StaticPool

    return sa_create_engine(url, echo=echo, future=True, connect_args=args, **engine_kwargs)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a configured session factory bound to the given engine."""
    return sessionmaker(bind=engine, class_=Session, expire_on_commit=False, future=True)
