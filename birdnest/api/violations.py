"""
Violation API endpoints.

Provides endpoints for:
- GET /api/ndz-violations - Current violations and last update time
- GET /api/status - Monitor status
"""

import logging
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

from birdnest.config import config

logger = logging.getLogger(__name__)

violations_bp = Blueprint('violations', __name__, url_prefix='/api')


def _get_monitor():
    return current_app.config.get('VIOLATION_MONITOR')


@violations_bp.route('/ndz-violations', methods=['GET'])
def list_violations():
    """
    List violations from the last 10 minutes.

    Response:
        {
            "violations": [
                {
                    "serialNumber": "SN-abc",
                    "closestDistanceInMm": 51234.5,
                    "pilot": {"firstName": ..., "lastName": ...,
                              "phoneNumber": ..., "email": ...} | null,
                    "latestCaptureDateAndTime": "2022-12-14T10:00:00+00:00"
                }
            ],
            "lastUpdatedAt": "2022-12-14T10:00:01+00:00" | null
        }
    """
    monitor = _get_monitor()
    if monitor is None:
        return jsonify({'violations': [], 'lastUpdatedAt': None})

    last_updated = monitor.get_last_updated_at()

    return jsonify({
        'violations': [v.to_dict() for v in monitor.get_violations()],
        'lastUpdatedAt': last_updated.isoformat() if last_updated else None,
    })


@violations_bp.route('/status', methods=['GET'])
def get_status():
    """
    Get monitor health and configuration.

    Status is 'degraded' while the monitor is stopped or the feed is
    throttled.
    """
    monitor = _get_monitor()
    monitor_stats = monitor.stats if monitor else {'running': False}

    healthy = monitor_stats.get('running') and not monitor_stats.get('throttled')

    if monitor is not None:
        center = monitor.zone_center
        radius_mm = monitor.zone_radius_mm
        retention_seconds = monitor.retention.total_seconds()
    else:
        center = config.zone.center
        radius_mm = config.zone.radius_mm
        retention_seconds = config.monitor.retention_minutes * 60

    return jsonify({
        'status': 'healthy' if healthy else 'degraded',
        'monitor': monitor_stats,
        'zone': {
            'center_mm': list(center),
            'radius_mm': radius_mm,
        },
        'config': {
            'poll_interval_seconds': config.monitor.poll_interval_seconds,
            'retention_seconds': retention_seconds,
        },
        'timestamp': datetime.now(timezone.utc).isoformat(),
    })
