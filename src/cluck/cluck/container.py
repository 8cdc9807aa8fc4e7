from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .clock.gateway import ClockGateway
from .core.constants import DEFAULT_NOTIFY_DELAY_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .hours.factory import TransitionStrategyFactory
from .hours.mysql_hour_log_repository import MySQLHourLogRepository
from .hours.repository import HourLogRepository
from .hours.service import HourLogService
from .members.mysql_member_repository import MySQLMemberRepository
from .members.repository import MemberRepository
from .notifications.outbox import NotificationOutbox
from .notifications.sink import LoggingNotificationSink, NotificationSink, WebhookNotificationSink
from .tasks.scheduler import KeyedTaskScheduler


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    members_repo: MemberRepository
    hour_logs_repo: HourLogRepository

    scheduler: Optional[KeyedTaskScheduler]
    outbox: NotificationOutbox

    hour_log_service: HourLogService
    clock_gateway: ClockGateway


def assemble(
    *,
    members_repo: MemberRepository,
    hour_logs_repo: HourLogRepository,
    sink: NotificationSink,
    scheduler: Optional[KeyedTaskScheduler] = None,
    notify_delay_seconds: float = DEFAULT_NOTIFY_DELAY_SECONDS,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of the given repositories (tests pass in-memory ones)."""
    outbox = NotificationOutbox(sink, scheduler, delay_seconds=notify_delay_seconds)
    hour_log_service = HourLogService(hour_logs_repo, strategy_factory=TransitionStrategyFactory())
    clock_gateway = ClockGateway(hour_log_service, members_repo, outbox)

    return Container(
        conn=conn,
        members_repo=members_repo,
        hour_logs_repo=hour_logs_repo,
        scheduler=scheduler,
        outbox=outbox,
        hour_log_service=hour_log_service,
        clock_gateway=clock_gateway,
    )


def build_container(
    *,
    db_config: dict,
    notify_webhook_url: Optional[str] = None,
    notify_delay_seconds: float = DEFAULT_NOTIFY_DELAY_SECONDS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    sink: NotificationSink
    if notify_webhook_url:
        sink = WebhookNotificationSink(notify_webhook_url)
    else:
        sink = LoggingNotificationSink()

    scheduler = KeyedTaskScheduler()
    scheduler.start()

    return assemble(
        members_repo=MySQLMemberRepository(conn),
        hour_logs_repo=MySQLHourLogRepository(conn),
        sink=sink,
        scheduler=scheduler,
        notify_delay_seconds=notify_delay_seconds,
        conn=conn,
    )
