"""Source loading.

:class:`SourceLoader` executes Python source files as modules, at most once
per resolved path for the lifetime of the process. A failed execution is not
recorded, so the same file may be retried.
"""

import importlib.util
import logging
import os
import sys
import types
from pathlib import Path
from typing import Dict, List, Optional, Union

from .exceptions import ResolutionError

_logger = logging.getLogger(__name__)

PathT = Union[str, os.PathLike]


def _module_file(module: types.ModuleType) -> Optional[Path]:
    f = getattr(module, "__file__", None)
    if not f:
        return None
    try:
        return Path(f).resolve()
    except OSError:
        return None


class SourceLoader:
    """Loads source files into modules.

    Attributes:
        history: Every path executed by this loader, in order.
    """

    def __init__(self) -> None:
        self._loaded: Dict[Path, types.ModuleType] = {}
        self.history: List[Path] = []

    def is_loaded(self, path: PathT) -> bool:
        return Path(path).resolve() in self._loaded

    def load(self, path: PathT, module_name: str) -> types.ModuleType:
        """Execute the file at *path* as *module_name* unless already loaded.

        The module is published in ``sys.modules`` under *module_name* when
        that name is free. A module already imported from the same file is
        reused instead of executed again.

        Raises:
            ResolutionError: If the file cannot be turned into a module spec.
        """
        resolved = Path(path).resolve()
        module = self._loaded.get(resolved)
        if module is not None:
            return module

        existing = sys.modules.get(module_name)
        if existing is not None and _module_file(existing) == resolved:
            self._loaded[resolved] = existing
            return existing

        spec = importlib.util.spec_from_file_location(module_name, resolved)
        if spec is None or spec.loader is None:
            raise ResolutionError(module_name, f"cannot load '{resolved}' as module '{module_name}'")
        module = importlib.util.module_from_spec(spec)

        published = module_name not in sys.modules
        if published:
            sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            if published:
                sys.modules.pop(module_name, None)
            raise

        self._loaded[resolved] = module
        self.history.append(resolved)
        _logger.debug("Loaded %s as %s", resolved, module_name)
        return module

    def reset(self) -> None:
        self._loaded.clear()
        self.history.clear()


_default_loader: Optional[SourceLoader] = None


def default_loader() -> SourceLoader:
    """Return the process-wide loader shared by containers without their own."""
    global _default_loader
    if _default_loader is None:
        _default_loader = SourceLoader()
    return _default_loader


def reset_default_loader() -> None:
    global _default_loader
    _default_loader = None
