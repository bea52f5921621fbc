from __future__ import annotations

import os
from typing import Any, Dict

from .settings import settings

# Default logging channel
default = settings.LOG_CHANNEL

channels: Dict[str, Dict[str, Any]] = {
    'stack': {
        'driver': 'stack',
        'channels': ['single', 'stderr'],
    },

    'single': {
        'driver': 'single',
        'path': os.getenv('LOG_PATH', 'storage/logs/scopedquery.log'),
        'level': settings.LOG_LEVEL,
    },

    'daily': {
        'driver': 'daily',
        'path': os.getenv('LOG_PATH', 'storage/logs/scopedquery.log'),
        'level': settings.LOG_LEVEL,
        'days': 14,
    },

    'stderr': {
        'driver': 'stderr',
        'level': settings.LOG_LEVEL,
        'formatter': 'laravel',
    },

    'json': {
        'driver': 'stderr',
        'level': settings.LOG_LEVEL,
        'formatter': 'json',
    },

    'query': {
        'driver': os.getenv('QUERY_LOG_DRIVER', 'stderr'),
        'path': 'storage/logs/query.log',
        'level': 'debug',
    },

    'null': {
        'driver': 'null',
    },
}

# Default logging level
level = settings.LOG_LEVEL
