"""HTTP control surface and health checks for the generator service."""
import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum

from flask import Flask, jsonify, request

from fleetgen.exceptions import FleetGenException
from fleetgen.service import GeneratorService

logger = logging.getLogger(__name__)

BUS_CHECK = "bus"
MAX_RECENT = 1000


class HealthStatus(Enum):
    """Health check status."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class HealthCheck:
    """Health check for a component."""
    name: str
    status: HealthStatus
    message: str = ""
    last_check: float = 0
    check_interval: float = 30.0

    def is_healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    def needs_check(self) -> bool:
        return time.time() - self.last_check > self.check_interval


class ControlServer:
    """Expose Start/Stop/Status and health endpoints over HTTP."""

    def __init__(self, service: GeneratorService, host: str = "0.0.0.0", port: int = 8080):
        """Initialize control server.

        Args:
            service: Generator service to control
            host: Interface to bind
            port: Port to listen on
        """
        self.service = service
        self.host = host
        self.port = port
        self.app = Flask(__name__)
        self.checks: dict[str, HealthCheck] = {
            BUS_CHECK: HealthCheck(BUS_CHECK, HealthStatus.DEGRADED, "not checked yet"),
        }
        self._thread = None

        self._setup_routes()

    def _setup_routes(self):
        @self.app.route('/generation/start', methods=['POST'])
        def start_generation():
            try:
                result = self.service.start()
            except FleetGenException as e:
                logger.error(f"Start request failed: {e}")
                return jsonify({"code": 500, "message": e.get_user_message()}), 500
            return jsonify(result.to_dict()), result.code

        @self.app.route('/generation/stop', methods=['POST'])
        def stop_generation():
            result = self.service.stop()
            return jsonify(result.to_dict()), result.code

        @self.app.route('/generation/status')
        def generation_status():
            return jsonify(self.service.status().to_dict())

        @self.app.route('/generation/recent')
        def recent_vehicles():
            limit = request.args.get('limit', default=50, type=int)
            limit = max(0, min(limit, MAX_RECENT))
            return jsonify({"items": self.service.view.recent(limit)})

        @self.app.route('/health')
        def health():
            self.refresh_checks()
            all_healthy = all(check.is_healthy() for check in self.checks.values())
            status_code = 200 if all_healthy else 503

            return jsonify({
                "status": "healthy" if all_healthy else "unhealthy",
                "generator": self.service.status().to_dict(),
                "checks": {
                    name: {
                        "status": check.status.value,
                        "message": check.message,
                        "last_check": check.last_check
                    }
                    for name, check in self.checks.items()
                }
            }), status_code

        @self.app.route('/health/live')
        def liveness():
            return jsonify({"status": "ok"}), 200

        @self.app.route('/health/ready')
        def readiness():
            self.refresh_checks()
            if self.checks[BUS_CHECK].is_healthy():
                return jsonify({"status": "ready"}), 200
            return jsonify({"status": "not ready"}), 503

    def refresh_checks(self, force: bool = False):
        """Re-run checks whose interval has elapsed."""
        check = self.checks[BUS_CHECK]
        if not (force or check.needs_check()):
            return
        if self.service.bus.health_check():
            self.update_check(BUS_CHECK, HealthStatus.HEALTHY, f"{self.service.config.bus.transport} reachable")
        else:
            self.update_check(BUS_CHECK, HealthStatus.UNHEALTHY, f"{self.service.config.bus.transport} unreachable")

    def update_check(self, name: str, status: HealthStatus, message: str = ""):
        """Update a health check status."""
        if name in self.checks:
            self.checks[name].status = status
            self.checks[name].message = message
            self.checks[name].last_check = time.time()

    def start(self):
        """Serve in a background thread."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run_server, name="fleetgen-http", daemon=True)
        self._thread.start()

    def _run_server(self):
        self.app.run(host=self.host, port=self.port, debug=False, use_reloader=False)
