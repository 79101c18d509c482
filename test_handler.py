"""
Tests for FluentdHandler (logging integration) and the demo CLI.
"""

import itertools
import logging

import msgpack
import pytest

from fluentd_forward import FluentdConfig, FluentdHandler
from fluentd_forward.cli import main
from fluentd_forward.handler import transcode_traceback

_logger_ids = itertools.count()


@pytest.fixture
def make_logger():
    """Isolated, non-propagating logger with a FluentdHandler attached."""
    attached = []

    def _make(config: FluentdConfig):
        handler = FluentdHandler(config)
        logger = logging.getLogger(f"app.test{next(_logger_ids)}")
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        logger.addHandler(handler)
        attached.append((logger, handler))
        return logger, handler

    yield _make

    for logger, handler in attached:
        logger.removeHandler(handler)
        handler.close()


def _config(collector, **kwargs) -> FluentdConfig:
    return FluentdConfig(host=collector.host, port=collector.port, tag="app", **kwargs)


def test_record_projection(collector, make_logger):
    logger, _ = make_logger(_config(collector))

    logger.info("Test Message")
    logger.warning('{"Data":"this is test data"}')

    first, second = collector.wait_for_messages(2)
    assert first[0] == "app"
    assert first[2] == {
        'level': 'INFO',
        'message': 'Test Message',
        'logger_name': logger.name,
        'sequence_id': 1,
    }
    assert second[2]['level'] == 'WARNING'
    assert second[2]['message'] == '{"Data":"this is test data"}'
    assert second[2]['sequence_id'] == 2


def test_timestamp_from_record(collector, make_logger):
    logger, _ = make_logger(_config(collector, use_event_time=True))

    logger.info("hi")

    time_value = collector.wait_for_messages(1)[0][1]
    assert isinstance(time_value, msgpack.ExtType)
    assert time_value.code == 0
    seconds = int.from_bytes(time_value.data[:4], "big")
    assert seconds > 1700000000


def test_stacktrace_emitted_when_enabled(collector, make_logger):
    logger, handler = make_logger(_config(collector, emit_stack_trace=True))
    handler.setFormatter(logging.Formatter("%(message)s"))

    try:
        raise RuntimeError("boom")
    except RuntimeError:
        logger.exception("failed")

    record = collector.wait_for_messages(1)[0][2]
    assert record['level'] == 'ERROR'
    frames = record['stacktrace']
    assert len(frames) == 1
    frame = frames[0]
    assert frame['method'] == 'test_stacktrace_emitted_when_enabled'
    assert frame['filename'].endswith('test_handler.py')
    assert isinstance(frame['line'], int)
    assert frame['code'] == 'raise RuntimeError("boom")'
    assert 'column' in frame


def test_stacktrace_omitted_by_default(collector, make_logger):
    logger, _ = make_logger(_config(collector))

    try:
        raise RuntimeError("boom")
    except RuntimeError:
        logger.exception("failed")

    record = collector.wait_for_messages(1)[0][2]
    assert 'stacktrace' not in record
    assert 'RuntimeError: boom' in record['message']


def test_transcode_traceback_without_traceback():
    assert transcode_traceback(None) == []


def test_library_records_are_skipped(collector):
    handler = FluentdHandler(_config(collector))
    try:
        record = logging.LogRecord(
            "fluentd_forward.publisher", logging.WARNING, __file__, 1, "diagnostic", None, None
        )
        handler.handle(record)

        assert handler.publisher.get_stats()['message_count'] == 0
        assert handler.publisher.get_stats()['connect_count'] == 0
    finally:
        handler.close()


def test_failures_go_to_handle_error(closed_port, make_logger, monkeypatch):
    logger, handler = make_logger(FluentdConfig(host="127.0.0.1", port=closed_port, tag="app"))
    failed = []
    monkeypatch.setattr(handler, "handleError", failed.append)

    logger.info("lost")

    assert len(failed) == 1
    assert failed[0].getMessage() == "lost"


def test_close_releases_connection(collector):
    handler = FluentdHandler(_config(collector))
    handler.handle(logging.LogRecord("app", logging.INFO, __file__, 1, "hi", None, None))
    assert handler.publisher.connection.is_connected

    handler.close()

    assert not handler.publisher.connection.is_connected


class TestCli:

    def test_sends_messages(self, collector, capsys):
        exit_code = main([
            "--host", collector.host,
            "--port", str(collector.port),
            "--tag", "cli",
            "hello",
            "world",
        ])

        assert exit_code == 0
        messages = collector.wait_for_messages(2)
        assert [m[0] for m in messages] == ["cli", "cli"]
        assert [m[2]['message'] for m in messages] == ["hello", "world"]
        assert [m[2]['logger_name'] for m in messages] == ["demo", "demo"]
        assert "Sent 2/2 messages" in capsys.readouterr().out

    def test_event_time_flag(self, collector):
        main(["--host", collector.host, "--port", str(collector.port), "--event-time", "hi"])

        time_value = collector.wait_for_messages(1)[0][1]
        assert isinstance(time_value, msgpack.ExtType)

    def test_yaml_config(self, collector, tmp_path):
        config_file = tmp_path / "fluentd.yaml"
        config_file.write_text(
            f"host: {collector.host}\nport: {collector.port}\ntag: from.yaml\n"
        )

        assert main(["--config", str(config_file), "hi"]) == 0
        assert collector.wait_for_messages(1)[0][0] == "from.yaml"

    def test_missing_config(self, tmp_path, capsys):
        assert main(["--config", str(tmp_path / "missing.yaml"), "hi"]) == 1
        assert "Config file not found" in capsys.readouterr().err

    def test_unreachable_collector(self, closed_port, monkeypatch):
        monkeypatch.setattr(logging, "raiseExceptions", False)

        assert main(["--port", str(closed_port), "hi"]) == 1
