import logging
import sys
import types
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple

from .constants import SOURCE_SUFFIX
from .exceptions import ConfigurationError, ResolutionError
from .identifiers import ComponentDescriptor
from .injection import PendingImport

if TYPE_CHECKING:
    from .container import Container

_logger = logging.getLogger(__name__)


class _ResolutionMixin:
    def add_load_paths(self, *dirs: Any) -> "Container":
        """Append root-relative *dirs* to the load paths and to ``sys.path``."""
        self._check_mutable("add load paths")
        for d in dirs:
            path = self.config.root / str(d)
            if path not in self._load_paths:
                self._load_paths.append(path)
            if str(path) not in sys.path:
                sys.path.insert(0, str(path))
        return self

    @property
    def load_paths(self) -> Tuple[Path, ...]:
        return tuple(self._load_paths)

    def _load(self, path: Path, module_name: str) -> types.ModuleType:
        with self.as_current():
            return self._loader.load(path, module_name)

    def _component_type(self, module: types.ModuleType, descriptor: ComponentDescriptor) -> Any:
        cls = getattr(module, descriptor.type_name, None)
        if cls is None or not callable(cls):
            msg = f"'{descriptor.file}' does not define {descriptor.qualified_name}"
            defined = self._defined_identifiers(module, descriptor)
            if defined:
                msg += f"; it matches {', '.join(defined)}"
            raise ResolutionError(descriptor.identifier, msg)
        return cls

    def _defined_identifiers(self, module: types.ModuleType, descriptor: ComponentDescriptor) -> List[str]:
        """Identifiers the classes defined in *module* would be found under."""
        naming = self.config.naming
        found = []
        for name, obj in vars(module).items():
            if not isinstance(obj, type) or obj.__module__ != module.__name__ or name.startswith("_"):
                continue
            ident = ".".join(descriptor.segments[:-1] + (naming.segment_for(name),))
            if naming.is_valid(ident) and naming.describe(ident).type_name == name:
                found.append(ident)
        return sorted(found)

    def require_component(self, identifier: str) -> Any:
        """Load the source file for *identifier* and return the type it defines.

        Raises:
            InvalidIdentifierError: If *identifier* is malformed.
            ResolutionError: If no load path contains the file, or the file
                does not define the expected type.
        """
        d = self.config.naming.describe(identifier)
        path = next((p / d.file for p in self._load_paths if (p / d.file).is_file()), None)
        if path is None:
            raise ResolutionError(d.identifier)
        return self._component_type(self._load(path, d.module_name), d)

    def register_component(self, identifier: str) -> "Container":
        """Register a factory for *identifier* unless one is registered already.

        The factory builds the component type with no arguments on first
        resolution.
        """
        d = self.config.naming.describe(identifier)
        self._check_mutable(f"register '{d.identifier}'")
        if self._registry.has(d.identifier):
            return self
        cls = self.require_component(d.identifier)
        self._registry.register(d.identifier, factory=cls, concrete_class=cls if isinstance(cls, type) else None)
        return self

    def _key(self, key: Any) -> Any:
        naming = self.config.naming
        return naming.describe(key).identifier if naming.is_valid(key) else key

    def register(self, key: str, value: Any = None, *, factory: Optional[Callable[[], Any]] = None, memoize: bool = True) -> "Container":
        key = self._key(key)
        self._check_mutable(f"register '{key}'")
        if factory is not None:
            self._registry.register(key, factory=factory, memoize=memoize)
        else:
            self._registry.register(key, value)
        return self

    def has(self, key: str) -> bool:
        return self._registry.has(self._key(key))

    __contains__ = has

    def keys(self) -> Tuple[str, ...]:
        return self._registry.keys()

    def resolve(self, identifier: str) -> Any:
        """Return the component registered under *identifier*.

        Unregistered identifiers are registered on the fly while the
        container is not finalized.

        Raises:
            ResolutionError: If the component cannot be located.
        """
        key = self._key(identifier)
        if not self._registry.has(key):
            key = self.config.naming.describe(identifier).identifier
            if not self.frozen:
                self.register_component(key)
        return self._registry.resolve(key)

    def __getitem__(self, identifier: str) -> Any:
        return self.resolve(identifier)

    def auto_register(self, directory: Any, construct: Optional[Callable[[Any], Any]] = None) -> "Container":
        """Register every source file below *directory*.

        Identifiers are derived from each file's path relative to the first
        segment of *directory*, so ``lib/persistence/user_repo.py`` scanned
        from ``"lib/persistence"`` registers ``persistence.user_repo``.
        Already registered identifiers are skipped.

        Args:
            directory: Root-relative directory to scan.
            construct: Called with each component type; its result is
                registered instead of a no-argument factory.
        """
        self._check_mutable(f"auto-register '{directory}'")
        rel = Path(str(directory))
        if rel.is_absolute() or not rel.parts:
            raise ConfigurationError(f"auto_register expects a root-relative directory, got '{directory}'")
        root = self.config.root
        dir_root = root / rel.parts[0]
        naming = self.config.naming
        base = root / rel
        if not base.is_dir():
            _logger.debug("Nothing to auto-register: %s is not a directory", base)
            return self
        count = 0

        for path in sorted(base.rglob(f"*{SOURCE_SUFFIX}")):
            relative = path.relative_to(dir_root)
            if any(part.startswith(("_", ".")) for part in relative.parts):
                continue
            d = naming.describe(naming.identifier_for(relative.as_posix()))
            if self._registry.has(d.identifier):
                continue
            cls = self._component_type(self._load(path, d.module_name), d)
            concrete = cls if isinstance(cls, type) else None
            if construct is not None:
                self._registry.register(d.identifier, construct(cls), concrete_class=concrete)
            else:
                self._registry.register(d.identifier, factory=cls, concrete_class=concrete)
            count += 1
        _logger.debug("Auto-registered %d component(s) from %s", count, directory)
        return self

    def require(self, *paths: str) -> List[types.ModuleType]:
        """Load root-relative source files; paths containing ``*`` are globbed."""
        root = self.config.root
        files: List[Path] = []
        for p in paths:
            files.extend(sorted(root.glob(p)) if "*" in p else [root / p])
        modules = []
        for f in files:
            if not f.is_file():
                raise ResolutionError(str(f), f"cannot require '{f}': no such file")
            modules.append(self._load(f, self._module_name_for(f)))
        return modules

    def _module_name_for(self, path: Path) -> str:
        try:
            rel = path.resolve().relative_to(self.config.root.resolve())
        except ValueError:
            rel = Path(path.name)
        return ".".join(rel.with_suffix("").parts)

    def imports(self, *identifiers: str, **aliases: str) -> PendingImport:
        return PendingImport(self, identifiers, aliases)
