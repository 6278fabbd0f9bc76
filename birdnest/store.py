"""
In-memory violation store.

Keeps one Violation per drone serial number for as long as the drone keeps
showing up inside the no-fly zone, and for the retention window after its
last sighting. Nothing is persisted; a restart starts from an empty store.

The monitor thread writes and Flask request threads read, so every
operation takes the store lock. Readers only ever get copies.
"""

import dataclasses
import logging
import threading
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from birdnest.models import PilotInfo, Violation

logger = logging.getLogger(__name__)


class ViolationStore:
    """Thread-safe table of current violations keyed by serial number."""

    def __init__(self):
        self._violations: Dict[str, Violation] = {}
        self._lock = threading.RLock()

    def __contains__(self, serial_number: str) -> bool:
        with self._lock:
            return serial_number in self._violations

    def __len__(self) -> int:
        with self._lock:
            return len(self._violations)

    def get(self, serial_number: str) -> Optional[Violation]:
        """Copy of the violation for serial_number, or None."""
        with self._lock:
            violation = self._violations.get(serial_number)
            return dataclasses.replace(violation) if violation else None

    def upsert(
        self,
        serial_number: str,
        distance_mm: float,
        pilot: Optional[PilotInfo],
        observed_at: datetime,
    ) -> None:
        """
        Record a sighting inside the zone.

        New drones get a fresh violation. For known drones last_seen_at
        moves to observed_at and the closest distance keeps the minimum;
        the stored pilot is left alone.
        """
        with self._lock:
            existing = self._violations.get(serial_number)
            if existing is None:
                self._violations[serial_number] = Violation(
                    serial_number=serial_number,
                    closest_distance_mm=distance_mm,
                    pilot=pilot,
                    last_seen_at=observed_at,
                )
                return

            existing.last_seen_at = observed_at
            if distance_mm < existing.closest_distance_mm:
                existing.closest_distance_mm = distance_mm

    def evict_older_than(self, now: datetime, retention: timedelta) -> int:
        """
        Drop violations last seen strictly before now - retention.

        Returns count of violations removed.
        """
        cutoff = now - retention
        with self._lock:
            stale = [sn for sn, v in self._violations.items() if v.last_seen_at < cutoff]
            for serial_number in stale:
                del self._violations[serial_number]

        if stale:
            logger.info(f'Evicted {len(stale)} violations last seen before {cutoff.isoformat()}')
        return len(stale)

    def snapshot(self) -> List[Violation]:
        """
        Independent copies of all violations, most recently seen first.

        PilotInfo is frozen, so a shallow copy per violation is enough.
        """
        with self._lock:
            result = [dataclasses.replace(v) for v in self._violations.values()]

        result.sort(key=lambda v: v.last_seen_at, reverse=True)
        return result
