"""Tests for the log manager channels and formatters."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from scopedquery.Log import JsonFormatter, LaravelFormatter, LogManager, get_log_manager


def make_record(message: str, context: dict) -> logging.LogRecord:
    record = logging.LogRecord('scopedquery.channel.query', logging.DEBUG, __file__, 1, message, None, None)
    record.context = context
    return record


class TestFormatters:
    """Laravel-style and JSON output."""

    def test_laravel_formatter(self) -> None:
        line = LaravelFormatter().format(make_record("Query executed", {'table': 'events'}))

        assert "query.DEBUG: Query executed" in line
        assert line.endswith('{"table": "events"}')

    def test_json_formatter(self) -> None:
        entry = json.loads(JsonFormatter().format(make_record("Query executed", {'time': 1.5})))

        assert entry['channel'] == 'query'
        assert entry['level'] == 'DEBUG'
        assert entry['context'] == {'time': 1.5}


class TestLogManager:
    """Channel creation from configuration."""

    def test_single_channel_writes_file(self, tmp_path: Path) -> None:
        path = tmp_path / 'logs' / 'query.log'
        manager = LogManager({
            'default': 'single',
            'channels': {'single': {'driver': 'single', 'path': str(path), 'level': 'debug'}},
        })

        manager.channel().info("Scope applied", {'scope': 'relevant'})
        for handler in manager.channel().logger.handlers:
            handler.flush()

        content = path.read_text()
        assert "single.INFO: Scope applied" in content
        assert '"scope": "relevant"' in content

    def test_unknown_channel_uses_default_config(self) -> None:
        manager = LogManager({'default': 'null', 'channels': {'null': {'driver': 'null'}}})
        channel = manager.channel('query')

        assert isinstance(channel.logger.handlers[0], logging.NullHandler)
        assert manager.get_channels()['query'] is channel

    def test_stack_channel_collects_handlers(self, tmp_path: Path) -> None:
        manager = LogManager({
            'default': 'stack',
            'channels': {
                'stack': {'driver': 'stack', 'channels': ['a', 'b']},
                'a': {'driver': 'single', 'path': str(tmp_path / 'a.log')},
                'b': {'driver': 'null'},
            },
        })

        handlers = manager.channel().logger.handlers

        assert any(isinstance(h, logging.FileHandler) for h in handlers)
        assert any(isinstance(h, logging.NullHandler) for h in handlers)

    def test_global_manager_is_replaced_in_tests(self, quiet_log_manager: LogManager) -> None:
        assert get_log_manager() is quiet_log_manager
