import logging
import sys
from pathlib import Path

from loguru import logger

from src.auth_api.runtime.config.config_data import ConfigData
from src.auth_api.runtime.context import get_config

PLAIN_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "[<cyan>{extra[request_id]}</cyan>] | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# stdlib loggers whose level is pinned after interception
LOGGER_LEVELS = {
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "passlib": logging.ERROR,
    "uvicorn": logging.INFO,
    "uvicorn.error": logging.INFO,
    "uvicorn.access": logging.CRITICAL,
}


class InterceptHandler(logging.Handler):
    """Forward stdlib ``logging`` records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # access lines come from the request middleware instead
        if record.name == "uvicorn.access":
            return

        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(depth=2, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def _add_sinks(config: ConfigData) -> None:
    log_cfg = config.logging
    verbose_tracebacks = config.app.environment != "production"

    logger.add(
        sys.stderr,
        level=log_cfg.level,
        format=PLAIN_FORMAT,
        colorize=True,
        backtrace=verbose_tracebacks,
        diagnose=verbose_tracebacks,
    )

    if not log_cfg.file:
        return

    path = Path(log_cfg.file)
    path.parent.mkdir(parents=True, exist_ok=True)
    as_json = log_cfg.format == "json"
    logger.add(
        str(path),
        level=log_cfg.level,
        format="{message}" if as_json else PLAIN_FORMAT,
        serialize=as_json,
        rotation=f"{log_cfg.max_size_mb} MB",
        retention=log_cfg.backup_count,
        compression="zip",
        enqueue=True,
        backtrace=verbose_tracebacks,
        diagnose=verbose_tracebacks,
    )


def _intercept_stdlib_logging() -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for name in list(logging.root.manager.loggerDict):
        existing = logging.getLogger(name)
        existing.handlers = []
        existing.propagate = True

    for name, level in LOGGER_LEVELS.items():
        logging.getLogger(name).setLevel(level)


def configure_logging(config: ConfigData | None = None) -> None:
    """Route application and library logs through loguru.

    Console output is always human readable; the optional file sink is JSON
    or plain depending on ``logging.format`` and rotates by size.
    """
    config = config or get_config()

    logger.remove()
    logger.configure(extra={"request_id": "-"})
    _add_sinks(config)
    _intercept_stdlib_logging()

    logger.info(
        "Logging configured",
        app_level=config.logging.level,
        app_format=config.logging.format,
        app_file=config.logging.file,
        environment=config.app.environment,
    )
