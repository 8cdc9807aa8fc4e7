from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import LogFamily, LogState
from ..core.exceptions import DuplicateSessionError, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import HourLog
from .repository import HourLogRepository

_COLUMNS = "id, member_id, type, state, time_in, time_out, duration, message, external_ref"


def _to_log(r: Dict[str, Any]) -> HourLog:
    duration = r.get("duration")
    return HourLog(
        id=str(r["id"]),
        member_id=r["member_id"],
        type=r["type"],
        state=LogState(r["state"]),
        time_in=r["time_in"],
        time_out=r.get("time_out"),
        duration=float(duration) if duration is not None else None,
        message=r.get("message"),
        external_ref=r.get("external_ref"),
    )


class MySQLHourLogRepository(HourLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, log_id: str) -> Optional[HourLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM hour_logs WHERE id=%s", (log_id,))
            r = fetchone(cur)
            return _to_log(r) if r else None

    def find_pending(self, member_id: str, family: LogFamily) -> Optional[HourLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM hour_logs
                WHERE member_id=%s AND type=%s AND state=%s
                ORDER BY time_in ASC
                LIMIT 1
                """,
                (member_id, family.value, LogState.PENDING.value),
            )
            r = fetchone(cur)
            return _to_log(r) if r else None

    def find_by_external_ref(self, external_ref: str) -> Optional[HourLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM hour_logs WHERE external_ref=%s", (external_ref,))
            r = fetchone(cur)
            return _to_log(r) if r else None

    def create(
        self,
        *,
        member_id: str,
        family: LogFamily,
        time_in: datetime,
        duration: Optional[float] = None,
        message: Optional[str] = None,
    ) -> HourLog:
        log = HourLog(
            id=str(uuid.uuid4()),
            member_id=member_id,
            type=family.value,
            state=LogState.PENDING,
            time_in=time_in,
            duration=duration,
            message=message,
        )
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO hour_logs(id, member_id, type, state, time_in, duration, message)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (log.id, log.member_id, log.type, log.state.value, log.time_in, log.duration, log.message),
                )
        except IntegrityError as e:
            if not is_duplicate_key(e):
                raise
            # uq_hour_logs_pending_lab rejected a second pending lab log.
            existing = self.find_pending(member_id, family)
            raise DuplicateSessionError(member_id, existing.id if existing else None) from e
        return log

    def update(
        self,
        log_id: str,
        *,
        state: LogState,
        time_out: datetime,
        type: Optional[str] = None,
    ) -> Optional[HourLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE hour_logs
                SET state=%s, time_out=%s, type=COALESCE(%s, type)
                WHERE id=%s
                """,
                (state.value, time_out, type, log_id),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM hour_logs WHERE id=%s", (log_id,))
            r = fetchone(cur)
            return _to_log(r) if r else None

    def attach_external_ref(self, log_id: str, external_ref: str) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("UPDATE hour_logs SET external_ref=%s WHERE id=%s", (external_ref, log_id))
                if cur.rowcount > 0:
                    return True
                # rowcount is 0 when the ref was already set to this value.
                cur.execute("SELECT id FROM hour_logs WHERE id=%s", (log_id,))
                return fetchone(cur) is not None
        except IntegrityError as e:
            if not is_duplicate_key(e):
                raise
            # uq_hour_logs_external_ref: the ref belongs to another log.
            raise ValidationError("ref is already attached to another request") from e

    def list_logs(
        self,
        *,
        state: Optional[LogState] = None,
        family: Optional[LogFamily] = None,
        member_id: Optional[str] = None,
        limit: int = 500,
    ) -> Sequence[HourLog]:
        clauses: list[str] = []
        params: list[object] = []

        if state is not None:
            clauses.append("state=%s")
            params.append(state.value)
        if family is not None:
            clauses.append("type=%s")
            params.append(family.value)
        if member_id is not None:
            clauses.append("member_id=%s")
            params.append(member_id)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM hour_logs
                {where}
                ORDER BY time_in ASC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_log(r) for r in fetchall(cur)]
