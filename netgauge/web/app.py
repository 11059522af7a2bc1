"""Flask application factory and HTTP routes."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from flask import Flask, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix

from ..config import AppConfig
from ..measurements.manager import MeasurementManager
from ..scheduler import SchedulerService

LOGGER = logging.getLogger(__name__)


def create_web_app(
    config: AppConfig,
    measurement_manager: MeasurementManager,
    scheduler: SchedulerService,
) -> Flask:
    app = Flask(__name__)

    if config.web.reverse_proxy_headers:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)  # type: ignore

    # one worker: queued runs execute strictly one after another
    executor = ThreadPoolExecutor(max_workers=1)

    @app.get("/api/quick-check")
    def api_quick_check():
        return jsonify(measurement_manager.quick_check().to_dict())

    @app.post("/api/manual/speedtest")
    def api_manual_speedtest():
        if measurement_manager.busy:
            return jsonify({"status": "busy", "task": "speedtest"}), 409
        executor.submit(_run_speedtest_task, measurement_manager)
        return jsonify({"status": "queued", "task": "speedtest"}), 202

    @app.get("/api/summary/latest")
    def api_latest_summary():
        return jsonify(measurement_manager.to_dict())

    @app.get("/api/provider")
    def api_provider():
        return jsonify(measurement_manager.provider().to_dict())

    @app.get("/api/status")
    def api_status():
        status = measurement_manager.status()
        if status is None:
            return jsonify({"error": "No speed test has completed yet"}), 404
        return jsonify(status.to_dict())

    @app.get("/api/scheduler")
    def api_scheduler():
        return jsonify(scheduler.describe())

    return app


def _run_speedtest_task(manager: MeasurementManager) -> None:
    try:
        manager.run_speedtest()
    except Exception as exc:  # pylint: disable=broad-except
        LOGGER.error("Manual speed test failed: %s", exc)
