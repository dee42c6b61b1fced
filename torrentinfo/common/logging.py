import datetime as dt
import json
from typing import override
import logging
import logging.config
import atexit
from pathlib import Path

# Structured fields torrentinfo modules attach through extra={...}
TORRENT_CONTEXT_KEYS = (
    "torrent_name",
    "num_files",
    "total_size",
    "info_hash",
    "field",
)

DEFAULT_FMT_KEYS = {
    "level": "levelname",
    "logger": "name",
    "function": "funcName",
    "line": "lineno",
}


class JSONLogFormatter(logging.Formatter):
    """
    One JSON object per record: fmt_keys (output key -> LogRecord
    attribute), message, timestamp, and whichever torrent context fields
    the record carries.
    """

    def __init__(
        self,
        *,
        fmt_keys: dict[str, str] | None = None,
        context_keys: tuple[str, ...] = TORRENT_CONTEXT_KEYS,
    ):
        super().__init__()
        self.fmt_keys = fmt_keys if fmt_keys is not None else dict(DEFAULT_FMT_KEYS)
        self.context_keys = context_keys

    @override
    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(self._prepare_log_dict(record), default=str)

    def _prepare_log_dict(self, record: logging.LogRecord) -> dict:
        message = {key: getattr(record, attr, None) for key, attr in self.fmt_keys.items()}
        message["message"] = record.getMessage()
        message["timestamp"] = dt.datetime.fromtimestamp(
            record.created, tz=dt.timezone.utc
        ).isoformat()

        context = {
            key: getattr(record, key) for key in self.context_keys if hasattr(record, key)
        }
        if context:
            message["torrent"] = context

        if record.exc_info is not None:
            message["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info is not None:
            message["stack_info"] = self.formatStack(record.stack_info)
        return message


def build_logging_config(log_path: Path, level: str = "INFO") -> dict:
    """
    dictConfig for the torrentinfo logger tree: warnings and up to stderr,
    everything at level to a rotating JSON-lines file, both behind a
    QueueHandler so parsing never blocks on file writes.
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "simple": {
                "format": "[%(levelname)s|%(module)s|L%(lineno)d] %(asctime)s: %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S%z",
            },
            "jsonl": {
                "()": JSONLogFormatter,
                "fmt_keys": dict(DEFAULT_FMT_KEYS),
            },
        },
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "level": "WARNING",
                "formatter": "simple",
                "stream": "ext://sys.stderr",
            },
            "torrent_jsonl": {
                "class": "logging.handlers.RotatingFileHandler",
                "level": "DEBUG",
                "formatter": "jsonl",
                "filename": str(log_path),
                "maxBytes": 1_000_000,
                "backupCount": 3,
            },
            "queue_handler": {
                "class": "logging.handlers.QueueHandler",
                "handlers": ["stderr", "torrent_jsonl"],
                "respect_handler_level": True,
            },
        },
        "loggers": {
            "torrentinfo": {
                "level": level.upper(),
                "handlers": ["queue_handler"],
                "propagate": False,
            }
        },
    }


def config_logging(log_path: Path | str, level: str = "INFO") -> None:
    """
    Apply build_logging_config and start the queue listener. Meant to be
    called once by an application; the library never configures logging.
    """
    log_path = Path(log_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(log_path, level))
    queue_handler = logging.getHandlerByName("queue_handler")
    if queue_handler is not None:
        queue_handler.listener.start()
        atexit.register(queue_handler.listener.stop)
