"""
Configuration management for the Birdnest NDZ monitor.

Loads settings from environment variables with sensible defaults.
The no-fly zone geometry, poll interval, retention window and rate-limit
cooldown are fixed by the monitoring rules and are not read from the
environment.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class FeedConfig:
    """Drone feed and pilot registry endpoints."""
    drones_url: str = os.getenv(
        'BIRDNEST_DRONES_URL',
        'https://assignments.reaktor.com/birdnest/drones',
    )
    pilots_url: str = os.getenv(
        'BIRDNEST_PILOTS_URL',
        'https://assignments.reaktor.com/birdnest/pilots',
    )
    request_timeout: float = float(os.getenv('BIRDNEST_REQUEST_TIMEOUT', '10'))

    # Back off this long after the feed answers 429
    rate_limit_cooldown_seconds: float = 6.0


@dataclass(frozen=True)
class NoFlyZoneConfig:
    """Circular no-fly zone, in millimeters on the feed's coordinate plane."""
    center_x_mm: float = 250_000.0
    center_y_mm: float = 250_000.0
    radius_mm: float = 100_000.0

    @property
    def center(self):
        return (self.center_x_mm, self.center_y_mm)


@dataclass(frozen=True)
class MonitorConfig:
    """Polling and retention settings."""
    # The feed itself refreshes every 2 seconds
    poll_interval_seconds: float = 2.0
    retention_minutes: int = 10
    max_pilot_workers: int = int(os.getenv('BIRDNEST_MAX_PILOT_WORKERS', '10'))


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    feed: FeedConfig = field(default_factory=FeedConfig)
    zone: NoFlyZoneConfig = field(default_factory=NoFlyZoneConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)

    port: int = 5000
    debug: bool = False


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return AppConfig(
        feed=FeedConfig(),
        zone=NoFlyZoneConfig(),
        monitor=MonitorConfig(),
        port=int(os.getenv('PORT', '5000')),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
    )


# Singleton instance
config = load_config()
