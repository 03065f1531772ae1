import logging
import logging.config
import os
from typing import Optional


class ColourizedFormatter(logging.Formatter):
    """
    Formatter that colours the level name on terminals.
    """
    GREY = "\x1b[90m"
    GREEN = "\x1b[32m"
    YELLOW = "\x1b[33m"
    RED = "\x1b[31m"
    BOLD_RED = "\x1b[31;1m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        orig_levelname = record.levelname
        if record.levelno in self.LEVEL_COLORS:
            record.levelname = f"{self.LEVEL_COLORS[record.levelno]}{record.levelname}{self.RESET}"
        result = super().format(record)
        # Restore so other handlers see the plain level name
        record.levelname = orig_levelname
        return result


def get_logging_config(level: Optional[str] = None, log_dir: Optional[str] = None) -> dict:
    log_level_name = (level or os.getenv("STATEMENTFLOW_LOG_LEVEL", "INFO")).upper()
    log_dir = log_dir or os.getenv("STATEMENTFLOW_LOG_DIR")
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "formatter": "colour",
        },
    }
    root_handlers = ["console"]
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "filename": os.path.join(log_dir, "statementflow.log"),
            "formatter": "plain",
        }
        root_handlers.append("file")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "colour": {
                "()": "statementflow.logger.ColourizedFormatter",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
            "plain": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
        },
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": root_handlers,
                "level": log_level_name,
            },
            "openai": {"level": "WARNING"},
            "httpx": {"level": "WARNING"},
        },
    }


def setup_logging(level: Optional[str] = None, log_dir: Optional[str] = None) -> None:
    logging.config.dictConfig(get_logging_config(level, log_dir))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
