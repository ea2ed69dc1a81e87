"""Boot units and finalization.

A boot unit is a source file ``<root>/<core_dir>/boot/<name>.py``. Booting
executes the file; while it runs, the file may call
``Container.current().finalize(name)`` to register a finalizer, which runs
right after the unit's body and before the unit is marked booted.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional

from .constants import BOOT_DIR, LOGGER, SOURCE_SUFFIX
from .exceptions import InvalidBootIdentifierError, InvalidIdentifierError

if TYPE_CHECKING:
    from .container import Container

_logger = logging.getLogger(__name__)

Finalizer = Callable[["Container"], Any]


class _BootMixin:
    _booted: Dict[str, bool]
    _finalizers: Dict[str, Finalizer]

    @property
    def boot_dir(self) -> Path:
        return self.config.root / self.config.core_dir / BOOT_DIR

    def _boot_path(self, name: str) -> Path:
        return self.boot_dir / f"{name}{SOURCE_SUFFIX}"

    def _boot_module_name(self, name: str) -> str:
        return ".".join(Path(self.config.core_dir).parts + (BOOT_DIR, name))

    def finalize(self, name: str, fn: Optional[Finalizer] = None):
        """Register *fn* as the finalizer of boot unit *name*.

        Usable as a decorator::

            @Container.current().finalize("database")
            def connect(container):
                ...
        """
        if fn is None:
            def dec(f: Finalizer) -> Finalizer:
                self.finalize(name, f)
                return f
            return dec
        self._check_mutable(f"register finalizer '{name}'")
        self._finalizers[name] = fn
        return fn

    def _check_boot_identifier(self, name: Any) -> None:
        try:
            segments = self.config.naming.split(name)
        except InvalidIdentifierError:
            raise InvalidBootIdentifierError(name) from None
        if len(segments) != 1 or not self._boot_path(name).is_file():
            raise InvalidBootIdentifierError(name)

    def is_booted(self, name: str) -> bool:
        return self._booted.get(name, False)

    @property
    def booted(self) -> Mapping[str, bool]:
        return dict(self._booted)

    def boot(self, name: str) -> "Container":
        """Boot unit *name* once; later calls are no-ops.

        Raises:
            InvalidBootIdentifierError: If *name* is malformed or has no boot file.
        """
        self._check_mutable(f"boot '{name}'")
        self._check_boot_identifier(name)
        if self.is_booted(name):
            return self
        self._boot(name)
        return self

    def _boot(self, name: str) -> None:
        self._load(self._boot_path(name), self._boot_module_name(name))
        finalizer = self._finalizers.get(name)
        if finalizer is not None:
            _logger.debug("Running finalizer for '%s'", name)
            finalizer(self)
        self._booted[name] = True
        _logger.debug("Booted '%s'", name)

    def boot_files(self) -> List[Path]:
        """Every source file below the boot directory, in path order.

        Files in subdirectories are listed too; their names are not valid
        boot identifiers, so :meth:`finalize_all` rejects them.
        """
        d = self.boot_dir
        if not d.is_dir():
            return []
        return sorted(
            p for p in d.rglob(f"*{SOURCE_SUFFIX}")
            if not any(part.startswith(("_", ".")) for part in p.relative_to(d).parts)
        )

    def _boot_name(self, path: Path) -> str:
        return path.relative_to(self.boot_dir).with_suffix("").as_posix()

    def finalize_all(self, fn: Optional[Callable[["Container"], Any]] = None) -> "Container":
        """Boot every unit in path order, auto-register, then freeze.

        Args:
            fn: Called with the container before the boot sweep.
        """
        self._check_mutable("finalize")
        if fn is not None:
            fn(self)
        for path in self.boot_files():
            self.boot(self._boot_name(path))
        for d in self.config.auto_register:
            self.auto_register(d)
        self._freeze()
        LOGGER.info(f"[{self.name}] finalized with {len(self._registry)} component(s)")
        return self
