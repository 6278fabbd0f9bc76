"""
Birdnest drone feed client.

Polls the drone monitoring equipment endpoint, which publishes a fresh XML
snapshot roughly every 2 seconds:

    <report>
      <deviceInformation deviceId="GUARDB1RD">...</deviceInformation>
      <capture snapshotTimestamp="2022-12-14T10:00:00.000Z">
        <drone>
          <serialNumber>SN-abc123</serialNumber>
          <model>HRP-DP</model>
          <manufacturer>ProDröne Ltd</manufacturer>
          <positionY>170543.21</positionY>
          <positionX>356872.04</positionX>
          <altitude>4522.33</altitude>
          ...
        </drone>
      </capture>
    </report>

Positions are millimeters on a flat plane. The endpoint enforces a rate
limit and answers 429 when polled too aggressively; the client then stops
making requests for a fixed cooldown.
"""

import logging
import time
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

import requests

from birdnest.config import config

logger = logging.getLogger(__name__)


@dataclass
class DroneReading:
    """
    One drone's position in a single snapshot.

    Only serial number and position are required; the descriptive fields
    are kept when the feed reports them.
    """
    serial_number: str
    position_x: float
    position_y: float
    model: Optional[str] = None
    manufacturer: Optional[str] = None
    altitude: Optional[float] = None

    @property
    def position(self):
        return (self.position_x, self.position_y)

    @classmethod
    def from_element(cls, elem: ET.Element) -> Optional['DroneReading']:
        """
        Parse a <drone> element.

        Returns None if the serial number or either coordinate is missing
        or not numeric.
        """
        serial_number = (elem.findtext('serialNumber') or '').strip()
        if not serial_number:
            return None

        try:
            position_x = float(elem.findtext('positionX'))
            position_y = float(elem.findtext('positionY'))
        except (TypeError, ValueError):
            return None

        altitude = None
        raw_altitude = elem.findtext('altitude')
        if raw_altitude:
            try:
                altitude = float(raw_altitude)
            except ValueError:
                pass

        return cls(
            serial_number=serial_number,
            position_x=position_x,
            position_y=position_y,
            model=(elem.findtext('model') or '').strip() or None,
            manufacturer=(elem.findtext('manufacturer') or '').strip() or None,
            altitude=altitude,
        )


@dataclass
class DroneSnapshot:
    """One poll's worth of drone readings plus the capture timestamp."""
    captured_at: datetime
    drones: List[DroneReading] = field(default_factory=list)


class FeedDecodeError(ValueError):
    """Raised when the feed payload is not a usable drone report."""


def parse_timestamp(value: Optional[str]) -> datetime:
    """Parse the feed's ISO-8601 snapshot timestamp into an aware UTC datetime."""
    if not value:
        raise FeedDecodeError('capture has no snapshotTimestamp')
    try:
        parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    except ValueError as e:
        raise FeedDecodeError(f'invalid snapshotTimestamp {value!r}') from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_report(payload: bytes) -> DroneSnapshot:
    """
    Decode a drone report XML document.

    Raises FeedDecodeError if the document or its capture element is
    unusable. Individual malformed <drone> entries are skipped.
    """
    try:
        root = ET.fromstring(payload)
    except ET.ParseError as e:
        raise FeedDecodeError(f'malformed XML: {e}') from e

    capture = root.find('capture')
    if capture is None:
        raise FeedDecodeError('report has no capture element')

    captured_at = parse_timestamp(capture.get('snapshotTimestamp'))

    drones = []
    for elem in capture.findall('drone'):
        reading = DroneReading.from_element(elem)
        if reading is None:
            logger.debug('Skipping malformed drone entry')
            continue
        drones.append(reading)

    return DroneSnapshot(captured_at=captured_at, drones=drones)


class DroneFeedClient:
    """
    Client for the drone position feed.

    Handles:
    - GET requests to the drones endpoint
    - XML decoding into DroneSnapshot
    - Rate limit cooldown after a 429 answer
    """

    def __init__(
        self,
        url: str = 'https://assignments.reaktor.com/birdnest/drones',
        timeout: float = 10.0,
        cooldown_seconds: float = 6.0,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.url = url
        self.timeout = timeout
        self.cooldown_seconds = cooldown_seconds
        self.session = session or requests.Session()
        self._clock = clock
        self._throttled_until: float = 0.0

    @classmethod
    def from_config(cls) -> 'DroneFeedClient':
        """Create client from application configuration."""
        return cls(
            url=config.feed.drones_url,
            timeout=config.feed.request_timeout,
            cooldown_seconds=config.feed.rate_limit_cooldown_seconds,
        )

    @property
    def is_throttled(self) -> bool:
        """True while the rate limit cooldown is running."""
        return self._clock() < self._throttled_until

    def _start_cooldown(self) -> None:
        self._throttled_until = self._clock() + self.cooldown_seconds
        logger.warning(
            f'Rate limit exceeded at {self.url}. '
            f'Waiting for {self.cooldown_seconds:g} seconds before making new requests...'
        )

    def fetch_snapshot(self) -> Optional[DroneSnapshot]:
        """
        Fetch and decode the current drone snapshot.

        Returns None when the feed is unavailable: throttled, transport
        error, non-success status or undecodable payload. Never raises for
        those conditions; the caller just skips the cycle.
        """
        if self.is_throttled:
            logger.debug('Feed throttled, skipping fetch')
            return None

        try:
            response = self.session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout:
            logger.error('Drone feed timeout')
            return None
        except requests.exceptions.HTTPError as e:
            if e.response is not None and e.response.status_code == 429:
                self._start_cooldown()
            else:
                status = e.response.status_code if e.response is not None else '?'
                logger.error(f'Drone feed error: {status}')
            return None
        except requests.exceptions.RequestException as e:
            logger.error(f'Drone feed request failed: {e}')
            return None

        try:
            snapshot = parse_report(response.content)
        except FeedDecodeError as e:
            logger.error(f'Could not decode drone feed: {e}')
            return None

        logger.debug(
            f'Received {len(snapshot.drones)} drones captured at '
            f'{snapshot.captured_at.isoformat()}'
        )
        return snapshot
