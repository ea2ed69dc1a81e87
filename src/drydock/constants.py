"""Constants used throughout drydock.

This module defines the framework logger, the on-disk layout conventions a
container relies on, and the attribute names stamped onto component classes.
"""

import logging

LOGGER_NAME: str = "drydock"
"""Default logger name for drydock."""

LOGGER: logging.Logger = logging.getLogger(LOGGER_NAME)
"""Pre-configured logger instance for drydock internal diagnostics."""

SOURCE_SUFFIX: str = ".py"
"""Suffix of loadable source files."""

DEFAULT_CORE_DIR: str = "core"
"""Directory (relative to the root) holding boot units and core sources."""

BOOT_DIR: str = "boot"
"""Subdirectory of the core directory holding boot-unit files."""

CONFIG_DIR: str = "config"
"""Directory (relative to the root) holding the application config file."""

APP_CONFIG_BASENAME: str = "application"
"""Base name of the application config file (``application.yml``/``.json``)."""

IMPORTS_ATTR: str = "_drydock_imports"
"""Attribute storing the identifiers a class imports through :class:`PendingImport`."""
