"""
Background Jobs for carrier pickups and tracking

Provides scheduled tasks for:
- Pickup cycle (book pending pickups per carrier)
- Tracking cycle (push pending tracking records per carrier)

Each cycle walks the configured carriers independently: one carrier failing is
logged and never stops the others or the loop.
"""
import asyncio
import logging
from typing import Dict, List, Optional

from carrier_routing.models.carrier import RequestType
from carrier_routing.services.shipping_service import ShippingService

logger = logging.getLogger(__name__)

# Consecutive failures per job before the log level escalates
FAILURE_ESCALATION_THRESHOLD = 3


class ShippingJobRunner:
    """
    Manages and runs shipping background jobs.

    Args:
        service: ShippingService used for every cycle
        carriers: Carrier ids to cycle over (default: SHIPPING_JOB_CARRIERS)
        pickup_interval: Seconds between pickup cycles
        tracking_interval: Seconds between tracking cycles
    """

    def __init__(
        self,
        service: ShippingService,
        carriers: Optional[List[str]] = None,
        pickup_interval: Optional[float] = None,
        tracking_interval: Optional[float] = None,
    ):
        from carrier_routing.core.config import settings

        self.service = service
        self.carriers = carriers if carriers is not None else list(settings.SHIPPING_JOB_CARRIERS)
        self.pickup_interval = settings.PICKUP_CYCLE_INTERVAL_SECONDS if pickup_interval is None else pickup_interval
        self.tracking_interval = (
            settings.TRACKING_CYCLE_INTERVAL_SECONDS if tracking_interval is None else tracking_interval
        )
        self._running = False
        self._tasks: List[asyncio.Task] = []
        self._consecutive_failures: Dict[str, int] = {}

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """Start all background jobs."""
        if self._running:
            logger.warning("Shipping jobs already running")
            return

        self._running = True
        logger.info(f"Starting shipping background jobs for {', '.join(self.carriers) or 'no carriers'}")

        self._tasks = [
            asyncio.create_task(self._pickup_loop()),
            asyncio.create_task(self._tracking_loop()),
        ]

    async def stop(self):
        """Stop all background jobs."""
        self._running = False

        for task in self._tasks:
            task.cancel()

        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
            self._tasks = []

        logger.info("Shipping background jobs stopped")

    # ==================== Loops ====================

    async def _pickup_loop(self):
        while self._running:
            await self.run_pickup_cycle()
            await asyncio.sleep(self.pickup_interval)

    async def _tracking_loop(self):
        while self._running:
            await self.run_tracking_cycle()
            await asyncio.sleep(self.tracking_interval)

    # ==================== Cycles ====================

    async def run_pickup_cycle(self) -> Dict[str, bool]:
        """Run one pickup cycle; returns success per carrier."""
        return await self._run_cycle(RequestType.PICKUP)

    async def run_tracking_cycle(self) -> Dict[str, bool]:
        """Run one tracking cycle; returns success per carrier."""
        return await self._run_cycle(RequestType.UPDATE)

    async def _run_cycle(self, request_type: RequestType) -> Dict[str, bool]:
        outcome = {}
        for carrier in self.carriers:
            job = f"{request_type.value.lower()}:{carrier}"
            try:
                await self.service.handle(request_type, {"carrier": carrier})
            except Exception as e:
                failures = self._consecutive_failures.get(job, 0) + 1
                self._consecutive_failures[job] = failures
                if failures >= FAILURE_ESCALATION_THRESHOLD:
                    logger.critical(f"Shipping job {job} failed {failures} times in a row: {e}")
                else:
                    logger.error(f"Shipping job {job} failed: {e}")
                outcome[carrier] = False
            else:
                self._consecutive_failures[job] = 0
                outcome[carrier] = True
        return outcome


_runner: Optional[ShippingJobRunner] = None


async def start_shipping_jobs(service: ShippingService) -> Optional[ShippingJobRunner]:
    """Start the background jobs if SHIPPING_JOBS_ENABLED."""
    from carrier_routing.core.config import settings

    global _runner
    if not settings.SHIPPING_JOBS_ENABLED:
        logger.info("Shipping jobs disabled")
        return None
    if _runner is None:
        _runner = ShippingJobRunner(service)
    await _runner.start()
    return _runner


async def stop_shipping_jobs():
    """Stop the background jobs if running."""
    global _runner
    if _runner is not None:
        await _runner.stop()
        _runner = None
