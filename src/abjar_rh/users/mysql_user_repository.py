from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["id"]),
        full_name=row["full_name"],
        npm=str(row["npm"]),
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, full_name, npm, password_hash, role, created_at
                FROM users
                WHERE id=%s
                """,
                (int(user_id),),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_npm(self, npm: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, full_name, npm, password_hash, role, created_at
                FROM users
                WHERE npm=%s
                """,
                (npm,),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(self, *, full_name: str, npm: str, password_hash: str, role: Role) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(full_name, npm, password_hash, role)
                VALUES(%s,%s,%s,%s)
                """,
                (full_name, npm, password_hash, role.value),
            )
            return int(cur.lastrowid)

    def update_role(self, user_id: int, role: Role, *, expected_role: Role, max_admins: Optional[int] = None) -> bool:
        sql = "UPDATE users SET role=%s WHERE id=%s AND role=%s"
        params: list = [role.value, int(user_id), expected_role.value]
        if max_admins is not None:
            # derived table: MySQL rejects a direct subquery on the updated table
            sql += " AND (SELECT n FROM (SELECT COUNT(*) AS n FROM users WHERE role=%s) AS c) < %s"
            params += [Role.ADMIN.value, int(max_admins)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return cur.rowcount > 0

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, full_name, npm, password_hash, role, created_at
                FROM users
                ORDER BY created_at DESC, id DESC
                """
            )
            return [_to_user(r) for r in fetchall(cur)]

    def count_by_role(self) -> dict[Role, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT role, COUNT(*) AS n FROM users GROUP BY role")
            counts = {role: 0 for role in Role}
            for r in fetchall(cur):
                counts[Role(r["role"])] = int(r["n"])
            return counts
