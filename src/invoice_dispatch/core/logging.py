import sys

from loguru import logger

from .config import Settings, settings as default_settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level> | {extra}"
)


def setup_logging(config: Settings | None = None, sink=sys.stderr):
    """Configure the loguru sink used by every pipeline module and return the logger"""
    config = config or default_settings
    logger.remove()
    logger.add(
        sink,
        level=config.log_level.upper(),
        format=LOG_FORMAT,
        serialize=config.log_json,
        backtrace=False,
        diagnose=False,
    )
    logger.configure(extra={"app": config.app_name, "env": config.app_env})
    return logger
