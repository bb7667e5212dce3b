import os
import sys
import logging
import json
from datetime import datetime, timezone
from eth_headers.rpc_context import get_current_rpc

_RESERVED = (
    "name","msg","args","levelname","levelno","pathname","filename",
    "module","exc_info","exc_text","stack_info","lineno","funcName",
    "created","msecs","relativeCreated","thread","threadName",
    "processName","process","taskName","message",
)

# -----------------------------
# JSON formatter (Loki / OpenSearch)
# -----------------------------
class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log = {
            "ts": datetime.now(timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "rpc": get_current_rpc(),
        }
        for key, value in record.__dict__.items():
            if key.startswith("_") or key in _RESERVED:
                continue
            log[key] = value
        if record.exc_info:
            log["exc"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)

def setup_logging(level=None):
    logger = logging.getLogger("eth_headers")
    logger.setLevel(level or os.getenv("LOG_LEVEL", "INFO").upper())
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    if not logger.handlers:
        logger.addHandler(handler)
    logger.propagate = False
    return logger

log = setup_logging()
