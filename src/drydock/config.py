"""Container settings and application configuration.

Provides :class:`Settings` (the mutable settings a container is configured
with), the tree sources used to read ``config/application.yml`` or
``config/application.json``, and :func:`load_app_config`, which turns the
section for one environment into an immutable :class:`AppConfig`.
"""

import copy
import json
import logging
import os
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional, Tuple

from .constants import APP_CONFIG_BASENAME, CONFIG_DIR, DEFAULT_CORE_DIR
from .exceptions import ConfigurationError
from .identifiers import DEFAULT_NAMING, NamingStrategy


class TreeSource:
    """Base class for tree-structured configuration sources.

    Subclasses must implement :meth:`get_tree` to return a nested mapping.
    """

    def get_tree(self) -> Mapping[str, Any]:
        raise NotImplementedError


class DictSource(TreeSource):
    """Tree source backed by an in-memory dictionary."""

    def __init__(self, data: Mapping[str, Any]):
        self._data = data

    def get_tree(self) -> Mapping[str, Any]:
        return self._data


class JsonTreeSource(TreeSource):
    """Tree source that reads configuration from a JSON file.

    Raises:
        ConfigurationError: If the file cannot be loaded or parsed.
    """

    def __init__(self, path: str):
        self._path = path

    def get_tree(self) -> Mapping[str, Any]:
        try:
            with open(self._path, encoding="utf-8") as f:
                return json.load(f)
        except Exception as e:
            raise ConfigurationError(f"Failed to load JSON config: {e}")


class YamlTreeSource(TreeSource):
    """Tree source that reads configuration from a YAML file.

    Requires ``PyYAML`` to be installed (``pip install drydock[yaml]``).

    Raises:
        ConfigurationError: If PyYAML is not installed, or if the file
            cannot be loaded or parsed.
    """

    def __init__(self, path: str):
        self._path = path

    def get_tree(self) -> Mapping[str, Any]:
        try:
            import yaml
        except Exception:
            raise ConfigurationError("PyYAML not installed")
        try:
            with open(self._path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            return data
        except Exception as e:
            raise ConfigurationError(f"Failed to load YAML config: {e}")


_env_pat = re.compile(r"\$\{ENV:([A-Za-z_][A-Za-z0-9_]*)\}")


def _interpolate(node: Any, environ: Mapping[str, str]) -> Any:
    if isinstance(node, dict):
        return {k: _interpolate(v, environ) for k, v in node.items()}
    if isinstance(node, list):
        return [_interpolate(x, environ) for x in node]
    if isinstance(node, str):
        def repl_env(m):
            v = environ.get(m.group(1))
            if v is None:
                raise ConfigurationError(f"Missing ENV var {m.group(1)}")
            return v
        return _env_pat.sub(repl_env, node)
    return node


class AppConfig(Mapping[str, Any]):
    """Read-only application settings with attribute access.

    Example:
        >>> cfg = AppConfig({"database_url": "sqlite://"})
        >>> cfg.database_url
        'sqlite://'
    """

    def __init__(self, data: Mapping[str, Any]):
        object.__setattr__(self, "_data", dict(data))

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __getattr__(self, name: str) -> Any:
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("AppConfig is read-only")

    def __repr__(self) -> str:
        return f"AppConfig({self._data!r})"


def _source_for(root: Path) -> Optional[TreeSource]:
    base = root / CONFIG_DIR
    for suffix, src in ((".yml", YamlTreeSource), (".yaml", YamlTreeSource), (".json", JsonTreeSource)):
        path = base / f"{APP_CONFIG_BASENAME}{suffix}"
        if path.is_file():
            return src(str(path))
    return None


def load_app_config(root: Path, env: Optional[str], environ: Optional[Mapping[str, str]] = None) -> Optional[AppConfig]:
    """Load the application settings for *env* below *root*.

    Reads ``config/application.yml`` (or ``.yaml``/``.json``) and takes the
    top-level section named after *env*. Keys are lower-cased; a value is
    replaced by the environment variable named like its original key when
    that variable is set, and ``${ENV:NAME}`` references are interpolated.

    Returns:
        ``None`` when no config file exists, else an :class:`AppConfig`.

    Raises:
        ConfigurationError: If the file is unreadable or malformed.
    """
    source = _source_for(Path(root))
    if source is None:
        return None
    environ = os.environ if environ is None else environ
    tree = source.get_tree()
    if not isinstance(tree, Mapping):
        raise ConfigurationError("Application config must be a mapping of environments")
    section = tree.get(str(env), None) if env is not None else None
    section = section or {}
    if not isinstance(section, Mapping):
        raise ConfigurationError(f"Config section for env '{env}' must be a mapping")
    out = {}
    for key, value in section.items():
        out[str(key).lower()] = _interpolate(environ.get(str(key), value), environ)
    return AppConfig(out)


@dataclass
class Settings:
    """Mutable container settings, fixed once the container is configured.

    Attributes:
        env: Environment name (e.g. ``"development"``).
        root: Application root directory.
        core_dir: Directory under *root* holding boot units.
        auto_register: Directories eagerly registered on finalization.
        naming: Identifier naming strategy.
        app: Application config loaded on ``configure()``.
        log_level: Level used by the ``logging`` plugin's logger.
    """
    env: Optional[str] = None
    root: Path = field(default_factory=Path.cwd)
    core_dir: str = DEFAULT_CORE_DIR
    auto_register: Tuple[str, ...] = ()
    naming: NamingStrategy = DEFAULT_NAMING
    app: Optional[AppConfig] = None
    log_level: int = logging.INFO

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "root":
            value = Path(value)
        elif name == "auto_register":
            if value is None:
                value = ()
            elif isinstance(value, (str, os.PathLike)):
                value = (str(value),)
            else:
                value = tuple(str(v) for v in value)
        super().__setattr__(name, value)

    def update(self, **settings: Any) -> "Settings":
        known = {f.name for f in fields(self)}
        unknown = sorted(set(settings) - known)
        if unknown:
            raise ConfigurationError(f"Unknown settings: {unknown}")
        for k, v in settings.items():
            setattr(self, k, v)
        return self

    def copy(self) -> "Settings":
        return copy.copy(self)
