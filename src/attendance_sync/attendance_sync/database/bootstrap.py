from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, List, Union

import mysql.connector

from .connection import DBConfig

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a schema file on ``;`` outside of quoted literals."""

    buf: List[str] = []
    quote = None
    for ch in _strip_comments(sql):
        if quote:
            buf.append(ch)
            if ch == quote:
                quote = None
            continue
        if ch in ("'", '"'):
            quote = ch
            buf.append(ch)
            continue
        if ch == ";":
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue
        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _connect(config: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=config.host, port=config.port, user=config.user, password=config.password, use_pure=True)
    if with_database:
        kwargs["database"] = config.database
    return mysql.connector.connect(**kwargs)


def ensure_database_exists(db_config: dict) -> None:
    config = DBConfig.from_dict(db_config)
    conn = _connect(config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: Union[str, Path] = SCHEMA_PATH) -> None:
    ensure_database_exists(db_config)
    sql = Path(schema_path).read_text(encoding="utf-8")

    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> List[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
