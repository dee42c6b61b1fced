import atexit
import json
import logging

import pytest

from conftest import MULTI_FILE_INFO_HASH
from torrentinfo.common.logging import JSONLogFormatter, build_logging_config, config_logging
from torrentinfo.torrent.parser import parse_torrent


@pytest.fixture
def restore_logger():
    yield
    logger = logging.getLogger("torrentinfo")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def _record(**context):
    record = logging.LogRecord(
        "torrentinfo.test", logging.INFO, __file__, 1, "parsed %s", ("x",), None
    )
    for key, value in context.items():
        setattr(record, key, value)
    return record


def test_json_formatter_fields():
    formatter = JSONLogFormatter(fmt_keys={"level": "levelname", "logger": "name"})
    payload = json.loads(formatter.format(_record(info_hash="abc", unrelated=1)))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "torrentinfo.test"
    assert payload["message"] == "parsed x"
    assert payload["torrent"] == {"info_hash": "abc"}
    assert "unrelated" not in payload
    assert "timestamp" in payload


def test_json_formatter_without_context():
    payload = json.loads(JSONLogFormatter().format(_record()))
    assert "torrent" not in payload
    assert payload["function"] is None


def test_build_logging_config_targets_torrentinfo(tmp_path):
    config = build_logging_config(tmp_path / "x.jsonl", "debug")
    assert config["loggers"]["torrentinfo"]["level"] == "DEBUG"
    assert config["handlers"]["torrent_jsonl"]["filename"] == str(tmp_path / "x.jsonl")
    assert "root" not in config["loggers"]


def test_parser_attaches_torrent_context(caplog, multi_file_torrent):
    with caplog.at_level(logging.INFO, logger="torrentinfo"):
        parse_torrent(multi_file_torrent)
    (record,) = [r for r in caplog.records if r.getMessage().startswith("Parsed")]
    assert record.torrent_name == "root"
    assert record.num_files == 3
    assert record.total_size == 60


def test_lenient_default_names_field(caplog):
    with caplog.at_level(logging.WARNING, logger="torrentinfo"):
        parse_torrent(b"d4:infod6:lengthi5e4:name1:x6:pieces0:ee")
    assert [r.field for r in caplog.records] == ["info.piece length"]


def test_config_logging_writes_json_lines(tmp_path, restore_logger, multi_file_torrent):
    log_path = tmp_path / "logs" / "torrentinfo.jsonl"
    config_logging(log_path, level="debug")
    assert log_path.parent.is_dir()

    parse_torrent(multi_file_torrent).info_hash()

    listener = logging.getHandlerByName("queue_handler").listener
    listener.stop()
    atexit.unregister(listener.stop)

    records = [json.loads(line) for line in log_path.read_text().splitlines()]
    assert all(r["logger"].startswith("torrentinfo") for r in records)
    contexts = [r["torrent"] for r in records if "torrent" in r]
    assert {"torrent_name": "root", "num_files": 3, "total_size": 60} in contexts
    assert {"info_hash": MULTI_FILE_INFO_HASH} in contexts
