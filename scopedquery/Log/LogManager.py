from __future__ import annotations

import json
import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


def _level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


class LogChannel:
    """Laravel-style log channel."""

    def __init__(self, name: str, handler: logging.Handler, level: Union[str, int] = logging.INFO) -> None:
        self.name = name
        self.logger = logging.getLogger(f"scopedquery.channel.{name}")
        self.logger.setLevel(_level(level))
        self.logger.handlers.clear()
        self.logger.addHandler(handler)
        self.logger.propagate = False

    def debug(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """Log debug message."""
        self._log(logging.DEBUG, message, context)

    def info(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """Log info message."""
        self._log(logging.INFO, message, context)

    def warning(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """Log warning message."""
        self._log(logging.WARNING, message, context)

    def error(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """Log error message."""
        self._log(logging.ERROR, message, context)

    def log(self, level: Union[str, int], message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """Log message at specified level."""
        self._log(_level(level), message, context)

    def _log(self, level: int, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        extra = {'context': context} if context else {}
        self.logger.log(level, message, extra=extra)


class LaravelFormatter(logging.Formatter):
    """Laravel-style log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')
        channel = record.name.rsplit('.', 1)[-1]
        log_line = f"[{timestamp}] {channel}.{record.levelname}: {record.getMessage()}"

        context = getattr(record, 'context', {})
        if context:
            log_line += f" {json.dumps(context, default=str)}"

        if record.exc_info:
            log_line += f"\n{self.formatException(record.exc_info)}"

        return log_line


class JsonFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'channel': record.name.rsplit('.', 1)[-1],
            'message': record.getMessage(),
            'context': getattr(record, 'context', {}),
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class LogManager:
    """
    Laravel-style log manager.

    Channels are created lazily from the ``channels`` table of the config,
    keyed by name, each with a ``driver`` of ``single``, ``daily``,
    ``stderr``, ``stack`` or ``null``. Unknown channel names fall back to the
    default channel's configuration.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        self._config = config or {}
        self._channels: Dict[str, LogChannel] = {}
        self._default_channel = self._config.get('default', 'stderr')

    def channel(self, name: Optional[str] = None) -> LogChannel:
        """Get a log channel."""
        if name is None:
            name = self._default_channel

        if name not in self._channels:
            self._create_channel(name)

        return self._channels[name]

    def _channel_config(self, name: str) -> Dict[str, Any]:
        channels = self._config.get('channels', {})
        if name in channels:
            return channels[name]
        return channels.get(self._default_channel, {'driver': 'stderr'})

    def _create_channel(self, name: str) -> None:
        config = self._channel_config(name)
        driver = config.get('driver', 'stderr')

        if driver == 'stack':
            self._create_stack_channel(name, config)
            return

        handler = self._create_handler(name, driver, config)
        handler.setFormatter(self._get_formatter(config))
        self._channels[name] = LogChannel(name, handler, config.get('level', logging.INFO))

    def _create_handler(self, name: str, driver: str, config: Dict[str, Any]) -> logging.Handler:
        if driver == 'null':
            return logging.NullHandler()

        if driver in ('single', 'daily'):
            path = config.get('path', f'storage/logs/{name}.log')
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            if driver == 'daily':
                return logging.handlers.TimedRotatingFileHandler(
                    path, when='midnight', interval=1, backupCount=config.get('days', 14)
                )
            return logging.FileHandler(path)

        return logging.StreamHandler(sys.stderr)

    def _create_stack_channel(self, name: str, config: Dict[str, Any]) -> None:
        """Create a stack log channel that combines multiple channels."""
        level = config.get('level', logging.DEBUG)
        stack = LogChannel(name, logging.NullHandler(), level)

        for channel_name in config.get('channels', []):
            if channel_name == name:
                continue
            for handler in self.channel(channel_name).logger.handlers:
                stack.logger.addHandler(handler)

        self._channels[name] = stack

    def _get_formatter(self, config: Dict[str, Any]) -> logging.Formatter:
        if config.get('formatter', 'laravel') == 'json':
            return JsonFormatter()
        return LaravelFormatter()

    def get_default_driver(self) -> str:
        return self._default_channel

    def set_default_driver(self, name: str) -> None:
        self._default_channel = name

    def get_channels(self) -> Dict[str, LogChannel]:
        return self._channels

    def forget_channel(self, name: str) -> None:
        if name in self._channels:
            del self._channels[name]

    # Proxy methods to default channel
    def debug(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self.channel().debug(message, context)

    def info(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self.channel().info(message, context)

    def warning(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self.channel().warning(message, context)

    def error(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self.channel().error(message, context)


# Global log manager instance
log_manager_instance: Optional[LogManager] = None


def get_log_manager() -> LogManager:
    """Get the global log manager instance, configured from config.logging."""
    global log_manager_instance
    if log_manager_instance is None:
        from config import logging as logging_config

        log_manager_instance = LogManager({
            'default': logging_config.default,
            'channels': logging_config.channels,
        })
    return log_manager_instance


def set_log_manager(manager: Optional[LogManager]) -> None:
    """Replace the global log manager; None resets it to the configured one."""
    global log_manager_instance
    log_manager_instance = manager


def logger(channel: Optional[str] = None) -> LogChannel:
    """Get a log channel."""
    return get_log_manager().channel(channel)


__all__: List[str] = [
    'LogManager',
    'LogChannel',
    'LaravelFormatter',
    'JsonFormatter',
    'get_log_manager',
    'set_log_manager',
    'logger',
]
