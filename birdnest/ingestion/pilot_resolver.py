"""
Pilot registry lookups.

Resolves drone serial numbers to registered pilots using the national
registry endpoint (GET {pilots_url}/{serialNumber}, JSON body). Lookups for
one batch run concurrently and the batch only returns once every lookup has
settled, so no request outlives the monitor cycle that started it.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

import requests

from birdnest.config import config
from birdnest.models import PilotInfo

logger = logging.getLogger(__name__)


class PilotResolver:
    """
    Concurrent pilot lookups with per-drone failure isolation.

    A failed lookup only affects its own drone. resolve_pilots() returns
    None, rather than a list, when the batch could not be attempted at all.
    """

    def __init__(
        self,
        base_url: str = 'https://assignments.reaktor.com/birdnest/pilots',
        timeout: float = 10.0,
        max_workers: int = 10,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_workers = max_workers
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls) -> 'PilotResolver':
        """Create resolver from application configuration."""
        return cls(
            base_url=config.feed.pilots_url,
            timeout=config.feed.request_timeout,
            max_workers=config.monitor.max_pilot_workers,
        )

    def fetch_pilot(self, serial_number: str) -> Optional[PilotInfo]:
        """
        Look up the pilot of a single drone.

        Returns None for any failure: transport error, non-200 status
        (the registry answers 404 for unknown drones) or incomplete record.
        """
        url = f'{self.base_url}/{serial_number}'
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f'Pilot lookup for {serial_number} failed: {e}')
            return None

        if response.status_code != 200:
            logger.debug(f'Pilot lookup for {serial_number} returned {response.status_code}')
            return None

        try:
            return PilotInfo.from_json(response.json())
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f'Unusable pilot record for {serial_number}: {e}')
            return None

    def resolve_pilots(self, serial_numbers: Sequence[str]) -> Optional[List[Optional[PilotInfo]]]:
        """
        Resolve pilots for a batch of serial numbers.

        Returns a list aligned with serial_numbers (None where a lookup
        failed), or None if the batch could not be started.
        """
        if not serial_numbers:
            return []

        workers = max(1, min(self.max_workers, len(serial_numbers)))
        try:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='pilot-lookup') as executor:
                futures = [executor.submit(self.fetch_pilot, sn) for sn in serial_numbers]
        except RuntimeError as e:
            # Interpreter shutdown or thread exhaustion
            logger.error(f'Could not start pilot lookups: {e}')
            return None

        # Leaving the executor block joins every lookup
        pilots = []
        for serial_number, future in zip(serial_numbers, futures):
            try:
                pilots.append(future.result())
            except Exception as e:
                logger.warning(f'Pilot lookup for {serial_number} raised: {e}')
                pilots.append(None)

        resolved = sum(1 for p in pilots if p is not None)
        logger.info(f'Resolved {resolved}/{len(pilots)} pilots')
        return pilots
