from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from ..core.enums import Role
from .connection import DatabaseConnection, DBConfig

DEMO_USERS = (
    # full_name, npm, password, role
    ("Super Admin", "10000000", "SuperAdmin#1", Role.SUPER_ADMIN),
    ("Admin Kelas", "20000001", "AdminKelas#1", Role.ADMIN),
    ("Anggota Demo", "30000001", "Anggota#123", Role.MEMBER),
)


def _strip_create_db_and_use(sql: str) -> str:
    # schema.sql must not pin a database name
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';' outside of quoted strings; skips `--` comment lines."""
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    lines = [ln for ln in sql.splitlines() if not ln.lstrip().startswith("--")]
    for ch in "\n".join(lines):
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(conn_factory: DatabaseConnection, path: str | Path) -> int:
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))
    conn = conn_factory.connect()
    count = 0
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    return count


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = DatabaseConnection(target).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> int:
    ensure_database_exists(db_config)
    return _run_script(DatabaseConnection(DBConfig.from_dict(db_config)), schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> int:
    return _run_script(DatabaseConnection(DBConfig.from_dict(db_config)), seed_path)


def ensure_demo_users(db_config: dict) -> None:
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor(dictionary=True)
        for full_name, npm, password, role in DEMO_USERS:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT id FROM users WHERE npm=%s", (npm,))
            if cur.fetchone():
                cur.execute(
                    "UPDATE users SET full_name=%s, password_hash=%s, role=%s WHERE npm=%s",
                    (full_name, password_hash, role.value, npm),
                )
            else:
                cur.execute(
                    "INSERT INTO users (full_name, npm, password_hash, role) VALUES (%s, %s, %s, %s)",
                    (full_name, npm, password_hash, role.value),
                )
        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
