from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Member
from .repository import MemberRepository


class MySQLMemberRepository(MemberRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def exists(self, member_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT email FROM members WHERE email=%s", (member_id,))
            return fetchone(cur) is not None

    def list_active(self) -> Sequence[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT email, first_name, full_name, active
                FROM members
                WHERE active=1
                ORDER BY full_name ASC
                """
            )
            return [
                Member(
                    email=r["email"],
                    first_name=r["first_name"],
                    full_name=r["full_name"],
                    active=bool(r.get("active", True)),
                )
                for r in fetchall(cur)
            ]
