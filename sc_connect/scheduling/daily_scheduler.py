"""Daily one-shot notification timers on top of APScheduler."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler

from sc_connect.configs.logging_config import get_logger
from sc_connect.configs.settings import SchedulerConfig
from sc_connect.scheduling.timing import next_occurrence

logger = get_logger(__name__)


class SchedulerState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"
    FIRING = "firing"


def build_scheduler() -> BackgroundScheduler:
    """Background scheduler shared by every daily job and the feedback poll."""
    return BackgroundScheduler(
        daemon=True,
        job_defaults={"coalesce": True, "misfire_grace_time": 300},
    )


class DailyNotificationScheduler:
    """
    Fire ``action`` once a day at ``hour`` o'clock.

    A re-arm job runs every 24 hours, starting when ``start()`` is called,
    and each run registers a one-shot timer for the next occurrence of the
    hour. States: IDLE -> ARMED -> FIRING -> IDLE.
    """

    def __init__(
        self,
        name: str,
        hour: int,
        action: Callable[[], Any],
        scheduler: BaseScheduler,
        rearm_interval_hours: int = SchedulerConfig.REARM_INTERVAL_HOURS,
    ) -> None:
        if not 0 <= hour <= 23:
            raise ValueError(f"hour must be between 0 and 23, got {hour}")
        self.name = name
        self.hour = hour
        self.action = action
        self.scheduler = scheduler
        self.rearm_interval_hours = rearm_interval_hours
        self.state = SchedulerState.IDLE
        self.next_fire_time: Optional[datetime] = None

    @property
    def rearm_job_id(self) -> str:
        return f"{self.name}:rearm"

    def start(self, now: Optional[datetime] = None) -> None:
        """Register the 24-hour re-arm job; its first run is immediate."""
        self.scheduler.add_job(
            self.arm,
            trigger="interval",
            hours=self.rearm_interval_hours,
            next_run_time=now or datetime.now(),
            id=self.rearm_job_id,
            replace_existing=True,
        )
        logger.info("%s re-arms every %d hours", self.name, self.rearm_interval_hours)

    def arm(self, now: Optional[datetime] = None) -> datetime:
        """Register the one-shot timer for the next occurrence of ``hour``."""
        now = now or datetime.now()
        fire_at = next_occurrence(self.hour, now)
        self.scheduler.add_job(
            self.fire,
            trigger="date",
            run_date=fire_at,
            id=f"{self.name}:fire:{fire_at:%Y%m%d%H}",
            replace_existing=True,
        )
        self.next_fire_time = fire_at
        self.state = SchedulerState.ARMED
        logger.info("%s armed for %s", self.name, fire_at.isoformat(sep=" "))
        return fire_at

    def fire(self) -> Any:
        self.state = SchedulerState.FIRING
        logger.info("%s firing", self.name)
        try:
            return self.action()
        except Exception:
            logger.exception("%s failed", self.name)
            raise
        finally:
            self.state = SchedulerState.IDLE
            self.next_fire_time = None
