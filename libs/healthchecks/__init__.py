"""
healthchecks.io integration: job pings and the read-only management API.
"""

from libs.healthchecks.client import (
    HealthchecksAPIError,
    HealthchecksClient,
    format_check_for_display,
    format_time,
    format_time_ago,
    get_healthchecks_client,
    get_status_emoji,
    match_check,
    normalize_status,
)
from libs.healthchecks.ping import ping, send_ping

__all__ = [
    'HealthchecksAPIError',
    'HealthchecksClient',
    'format_check_for_display',
    'format_time',
    'format_time_ago',
    'get_healthchecks_client',
    'get_status_emoji',
    'match_check',
    'normalize_status',
    'ping',
    'send_ping',
]
