import json
import logging
import sys
import time

from Passport_Retrieval.pr_shared import config

# retrieval context attached via `extra=`; "-" when a call site has none
CONTEXT_FIELDS = ("stage", "lookup_key", "cid")


class RetrievalContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        for field in CONTEXT_FIELDS:
            if not hasattr(record, field):
                setattr(record, field, "-")
        return True


class JsonLineFormatter(logging.Formatter):
    """One JSON object per line, UTC timestamps, retrieval context fields."""

    converter = time.gmtime

    def __init__(self):
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%SZ")

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            entry[field] = getattr(record, field, "-")
        return json.dumps(entry)


def get_logger(name: str = "passport", level: str | int | None = None) -> logging.Logger:
    """Structured logger shared by every retrieval component.

    Handlers are attached once per logger name, so repeated calls are cheap.
    Pass `extra={"stage": ..., "lookup_key": ..., "cid": ...}` to tag a line.
    Never log plaintext or the passphrase.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level or config.LOG_LEVEL)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonLineFormatter())
        handler.addFilter(RetrievalContextFilter())
        logger.addHandler(handler)

    return logger
