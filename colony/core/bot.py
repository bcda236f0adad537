import logging
import signal
import time
from types import FrameType

import schedule

from colony.core.controller.zone_controller import ZoneController, StepReport
from colony.core.model.records import ZoneRecord, WorkerRecord
from colony.core.protocols.world_protocol import WorldProtocol
from colony.domain.config import Config

logger = logging.getLogger(__name__)


class ColonyBot:
    """Drives every observed zone one step at a time on a real-time schedule."""

    def __init__(self, world: WorldProtocol, config: Config = Config(), install_signal_handlers: bool = True) -> None:
        self.world = world
        self.config = config
        self.controllers: dict[str, ZoneController] = {}
        self.records: dict[str, ZoneRecord] = {}
        self.current_step: int = 0
        self._running: bool = False
        self._step_job = None

        if install_signal_handlers:
            self._setup_signal_handlers()

    def _setup_signal_handlers(self) -> None:
        """Setup graceful shutdown handlers for SIGINT and SIGTERM."""
        signal.signal(signal.SIGINT, self._shutdown_handler)
        signal.signal(signal.SIGTERM, self._shutdown_handler)

    def _shutdown_handler(self, signum: int, frame: FrameType | None) -> None:
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        self._running = False

    def _sync_zones(self) -> None:
        """Create controllers for newly observed zones and drop the ones that vanished."""
        observed = set(self.world.observable_zone_ids())

        for zone_id in sorted(set(self.controllers) - observed):
            record = self.controllers.pop(zone_id).to_record()
            if record is not None:
                self.records[zone_id] = record
            logger.info(f"Zone {zone_id} no longer observable, controller dropped")

        for zone_id in sorted(observed - set(self.controllers)):
            controller = ZoneController(
                zone_id,
                metrics=self.world,
                population=self.world,
                facilities=self.world,
                movement=self.world,
                config=self.config,
            )
            record = self.records.pop(zone_id, None)
            if record is not None:
                controller.restore(record, self.current_step)
            self.controllers[zone_id] = controller
            logger.info(f"Zone {zone_id} observed, controller created")

    def step(self) -> list[StepReport]:
        """Run exactly one step for every observed zone, then advance the world."""
        self._sync_zones()
        reports = []
        for zone_id, controller in self.controllers.items():
            zone = self.world.get_zone(zone_id)
            if zone is None:
                continue
            try:
                reports.append(controller.step(zone, self.current_step))
            except Exception as e:
                logger.error(f"Step {self.current_step} failed for zone {zone_id}: {e}", exc_info=True)

        self.world.advance()
        self.current_step += 1
        return reports

    def worker_records(self) -> dict[str, WorkerRecord]:
        """Persistable state of every worker in the observed zones, keyed by worker id."""
        records = {}
        for zone_id in sorted(self.controllers):
            records.update(self.controllers[zone_id].worker_records())
        return records

    def run(self) -> None:
        """Start the bot's main loop."""
        logger.info("Starting colony bot...")
        self._running = True

        interval = self.config.loop_config.step_interval_seconds
        self._step_job = schedule.every(interval).seconds.do(self.step)
        logger.info(f"Scheduler configured: one step every {interval}s")

        while self._running:
            schedule.run_pending()
            time.sleep(0.1)

        self._cleanup()

    def _cleanup(self) -> None:
        logger.info("Cleaning up...")
        if self._step_job is not None:
            schedule.cancel_job(self._step_job)
            self._step_job = None
        schedule.clear()
        logger.info(f"Shutdown complete after {self.current_step} steps, {len(self.controllers)} zones active.")
