"""
No-fly zone violation monitor - orchestrates one polling cycle.

Cycle stages:
1. Fetch: poll the drone feed (skipped while rate-limit cooldown runs)
2. Measure: distance of every drone to the zone center
3. Filter: keep drones inside the zone radius
4. Resolve: look up pilots, only for drones not tracked yet
5. Upsert: record new violations, refresh distance/last-seen of all
6. Evict: drop violations unseen for the retention window

The feed repeats violating drones every 2 seconds, so pilots are looked up
once per drone and kept; distance and recency are re-evaluated each cycle.
"""

import logging
import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from birdnest.config import config
from birdnest.geometry import Point, distances_to_center, is_within_zone
from birdnest.ingestion.drone_feed import DroneFeedClient, DroneReading
from birdnest.ingestion.pilot_resolver import PilotResolver
from birdnest.models import Violation
from birdnest.store import ViolationStore

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ViolationMonitor:
    """
    Owns the violation store and the "last updated" timestamp.

    run_cycle() executes one poll. start_background() runs it every
    poll interval on a daemon thread; a cycle always finishes before the
    next one starts, so the store is only written from one cycle at a time.
    """

    def __init__(
        self,
        feed_client: Optional[DroneFeedClient] = None,
        pilot_resolver: Optional[PilotResolver] = None,
        store: Optional[ViolationStore] = None,
        zone_center: Optional[Point] = None,
        zone_radius_mm: Optional[float] = None,
        retention: Optional[timedelta] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize the monitor.

        Args:
            feed_client: Drone feed client (created from config if None)
            pilot_resolver: Pilot registry client (created from config if None)
            store: Violation store shared with the API layer
            zone_center: (x, y) of the no-fly zone center in mm
            zone_radius_mm: No-fly zone radius in mm
            retention: How long a violation is kept after its last sighting
            clock: Wall-clock source used for eviction and last-updated
        """
        self.feed_client = feed_client or DroneFeedClient.from_config()
        self.pilot_resolver = pilot_resolver or PilotResolver.from_config()
        self.store = store if store is not None else ViolationStore()
        self.zone_center = zone_center if zone_center is not None else config.zone.center
        self.zone_radius_mm = zone_radius_mm if zone_radius_mm is not None else config.zone.radius_mm
        if retention is None:
            retention = timedelta(minutes=config.monitor.retention_minutes)
        self.retention = retention
        self._clock = clock

        self._last_updated_at: Optional[datetime] = None

        # State tracking
        self._running = False
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._cycle_count: int = 0
        self._skipped_count: int = 0
        self._error_count: int = 0

    def get_violations(self) -> List[Violation]:
        """Defensive copy of the current violations."""
        return self.store.snapshot()

    def get_last_updated_at(self) -> Optional[datetime]:
        """Wall-clock time of the last fully processed poll, or None."""
        return self._last_updated_at

    def _check_violations(self) -> bool:
        """
        Fetch one snapshot and merge its violations into the store.

        Returns False when the cycle was skipped without processing a
        snapshot (throttled, feed unavailable, pilot lookup impossible).
        """
        if self.feed_client.is_throttled:
            logger.debug('Feed throttled, idle this cycle')
            return False

        snapshot = self.feed_client.fetch_snapshot()
        if snapshot is None:
            return False

        if not snapshot.drones:
            logger.debug('Snapshot contains no drones')
            return True

        distances = distances_to_center(
            (drone.position for drone in snapshot.drones),
            self.zone_center,
        )
        offenders = [
            (drone, float(distance))
            for drone, distance in zip(snapshot.drones, distances)
            if is_within_zone(distance, self.zone_radius_mm)
        ]

        if not offenders:
            logger.debug(f'None of {len(snapshot.drones)} drones inside the zone')
            return True

        new_offenders: List[DroneReading] = [
            drone for drone, _ in offenders if drone.serial_number not in self.store
        ]

        if new_offenders:
            pilots = self.pilot_resolver.resolve_pilots(
                [drone.serial_number for drone in new_offenders]
            )
            if pilots is None:
                logger.error('Pilot resolution unavailable, skipping cycle')
                return False

            new_distances = {drone.serial_number: distance for drone, distance in offenders}
            for drone, pilot in zip(new_offenders, pilots):
                self.store.upsert(
                    drone.serial_number,
                    new_distances[drone.serial_number],
                    pilot,
                    snapshot.captured_at,
                )
                logger.info(
                    f'New violation: {drone.serial_number} at '
                    f'{new_distances[drone.serial_number] / 1000:.1f} m'
                )

        for drone, distance in offenders:
            self.store.upsert(drone.serial_number, distance, None, snapshot.captured_at)

        logger.debug(
            f'{len(offenders)} drones inside the zone '
            f'({len(new_offenders)} new), {len(self.store)} tracked'
        )
        return True

    def run_cycle(self) -> bool:
        """
        Execute one monitoring cycle.

        Eviction runs even when the snapshot was skipped, so a feed outage
        does not keep stale violations alive. Returns True if a snapshot
        was processed and last-updated advanced.
        """
        self._cycle_count += 1
        try:
            processed = self._check_violations()
        except Exception:
            self._error_count += 1
            logger.exception('Monitor cycle failed')
            processed = False

        now = self._clock()
        self.store.evict_older_than(now, self.retention)

        if processed:
            self._last_updated_at = now
        else:
            self._skipped_count += 1
        return processed

    def run_continuous(self, interval: Optional[float] = None) -> None:
        """
        Run cycles at a fixed rate until stop() is called.

        The first cycle runs immediately. A cycle that overruns the
        interval delays the next one instead of overlapping it.

        This method blocks - use start_background() for non-blocking.
        """
        if interval is None:
            interval = config.monitor.poll_interval_seconds
        self._running = True
        self._stop_event.clear()

        logger.info(f'Starting violation monitor (interval={interval}s)')

        while not self._stop_event.is_set():
            started = time.monotonic()
            self.run_cycle()
            elapsed = time.monotonic() - started
            self._stop_event.wait(max(0.0, interval - elapsed))

        self._running = False
        logger.info('Violation monitor stopped')

    def start_background(self, interval: Optional[float] = None) -> None:
        """Start monitoring in background thread."""
        if self._thread and self._thread.is_alive():
            logger.warning('Violation monitor already running')
            return

        self._thread = threading.Thread(
            target=self.run_continuous,
            args=(interval,),
            name='violation-monitor',
            daemon=True,
        )
        self._thread.start()
        logger.info('Background violation monitor started')

    def stop(self, timeout: Optional[float] = 15) -> None:
        """
        Stop background monitoring.

        A cycle in progress is allowed to finish. If it outlasts timeout,
        the monitor keeps reporting running until the thread exits.
        """
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning('Violation monitor still finishing its current cycle')
                return
        self._running = False

    @property
    def stats(self) -> dict:
        """Get monitor statistics."""
        return {
            'cycle_count': self._cycle_count,
            'skipped_count': self._skipped_count,
            'error_count': self._error_count,
            'throttled': self.feed_client.is_throttled,
            'violations': len(self.store),
            'last_updated_at': self._last_updated_at.isoformat() if self._last_updated_at else None,
            'running': self._running,
        }
