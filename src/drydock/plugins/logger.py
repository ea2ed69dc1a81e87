"""``logging`` plugin: a per-container logger registered as ``logger``."""

import logging

from ..constants import LOGGER_NAME

LOGGER_KEY = "logger"


def build_logger(container) -> logging.Logger:
    log = logging.getLogger(f"{LOGGER_NAME}.{container.name}")
    log.setLevel(container.config.log_level)
    return log


class Logging:
    @property
    def logger(self) -> logging.Logger:
        return self.resolve(LOGGER_KEY)


def register_logger(container) -> None:
    if not container.has(LOGGER_KEY):
        container.register(LOGGER_KEY, factory=lambda: build_logger(container))
