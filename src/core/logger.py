import json
import logging

from config import Config

_RESET = "\x1b[0m"


class ColorizedFormatter(logging.Formatter):
    LEVEL_COLORS = {
        logging.DEBUG: "\x1b[0;37m",
        logging.INFO: "\x1b[1;36m",
        logging.WARNING: "\x1b[1;33m",
        logging.ERROR: "\x1b[1;31m",
        logging.CRITICAL: "\x1b[5m\x1b[1;31m",
    }

    def __init__(self) -> None:
        super().__init__(
            "%(asctime)s %(name)s (%(filename)s:%(lineno)d) %(levelname)s - %(message)s"
        )

    def formatMessage(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, "")
        return color + super().formatMessage(record) + _RESET


class JsonFormatter(logging.Formatter):
    """One json object per line, for the error log file"""

    def format(self, record: logging.LogRecord) -> str:
        res = {
            "severity": record.levelname,
            "resource": f"{record.pathname}:{record.lineno}",
            "timestamp": self.formatTime(record),
            "body": record.getMessage(),
        }
        if record.exc_info:
            res["exception"] = self.formatException(record.exc_info)
        return json.dumps(res)


def setup_logger(cfg: Config) -> logging.Logger:
    logger = logging.getLogger(cfg.logging.name)
    logger.propagate = False
    logger.setLevel(logging.DEBUG if cfg.debug else logging.INFO)
    # container may be rebuilt, so handlers of the previous setup are dropped
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(ColorizedFormatter())
    logger.addHandler(stream_handler)
    if not cfg.debug:
        error_log_path = cfg.logging.error_log_path
        error_log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(error_log_path, "a", encoding="utf-8")
        file_handler.setLevel(logging.WARNING)
        file_handler.setFormatter(JsonFormatter())
        logger.addHandler(file_handler)
    return logger
