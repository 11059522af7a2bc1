"""Background scheduler orchestration."""

from __future__ import annotations

import logging
from typing import Any, Dict

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .config import AppConfig
from .measurements.manager import MeasurementManager

LOGGER = logging.getLogger(__name__)

JOB_ID = "scheduled-speedtest"


class SchedulerService:
    def __init__(self, config: AppConfig, measurement_manager: MeasurementManager) -> None:
        self.config = config
        self.measurements = measurement_manager
        self.scheduler = BackgroundScheduler(timezone="UTC")
        self.started = False

    def start(self) -> None:
        if self.started:
            LOGGER.warning("Scheduler already started, ignoring duplicate start request")
            return

        if not self.config.scheduler.enabled:
            LOGGER.info("Scheduler is disabled in configuration")
            return

        interval = self.config.scheduler.interval_minutes
        try:
            self.scheduler.add_job(
                self._run_cycle,
                trigger=IntervalTrigger(minutes=interval),
                id=JOB_ID,
                max_instances=1,
                coalesce=True,
            )
            self.scheduler.start()
            self.started = True
            LOGGER.info("Scheduler started with interval %s minutes", interval)
        except Exception as exc:  # pylint: disable=broad-except
            LOGGER.error("Failed to start scheduler: %s", exc, exc_info=True)
            LOGGER.error("Speed tests can still be triggered manually")

    def shutdown(self) -> None:
        if self.started:
            self.scheduler.shutdown(wait=False)
            self.started = False

    def describe(self) -> Dict[str, Any]:
        job = self.scheduler.get_job(JOB_ID) if self.started else None
        next_run = getattr(job, "next_run_time", None) if job else None
        return {
            "enabled": self.config.scheduler.enabled,
            "running": self.started,
            "interval_minutes": self.config.scheduler.interval_minutes,
            "next_run": next_run.isoformat() if next_run else None,
        }

    def _run_cycle(self) -> None:
        if self.measurements.busy:
            LOGGER.info("Skipping scheduled speed test, another run is in progress")
            return
        LOGGER.info("Starting scheduled speed test")
        try:
            self.measurements.run_speedtest()
        except Exception as exc:  # pylint: disable=broad-except
            LOGGER.exception("Scheduled speed test failed: %s", exc)
