"""Deferred dependency injection.

:meth:`Container.imports` returns a :class:`PendingImport`: a value capturing
the requested identifiers. Nothing is loaded until :meth:`PendingImport.resolve_now`
runs, either directly or when an instance of a class decorated with the
pending import is constructed.
"""

import functools
from typing import TYPE_CHECKING, Any, Dict, Iterable, Mapping, Tuple

from .constants import IMPORTS_ATTR
from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .container import Container


class PendingImport:
    """Identifiers bound to keyword names, resolved on demand.

    Positional identifiers are bound to their last segment
    (``"persistence.user_repo"`` -> ``user_repo``); keyword aliases bind an
    explicit name.

    Example:
        >>> Import = container.imports("persistence.user_repo", mailer="mail.smtp_client")
        >>> @Import
        ... class SignUp:
        ...     def __init__(self, user_repo, mailer):
        ...         ...
    """

    def __init__(self, container: "Container", identifiers: Iterable[str], aliases: Mapping[str, str]):
        self._container = container
        naming = container.config.naming
        bindings: Dict[str, str] = {}
        for ident in identifiers:
            d = naming.describe(ident)
            self._bind(bindings, d.name, d.identifier)
        for name, ident in aliases.items():
            self._bind(bindings, name, naming.describe(ident).identifier)
        self.bindings = bindings

    @staticmethod
    def _bind(bindings: Dict[str, str], name: str, identifier: str) -> None:
        if name in bindings and bindings[name] != identifier:
            raise ConfigurationError(
                f"Import name '{name}' bound to both '{bindings[name]}' and '{identifier}'; use an alias"
            )
        bindings[name] = identifier

    @property
    def identifiers(self) -> Tuple[str, ...]:
        return tuple(dict.fromkeys(self.bindings.values()))

    def resolve_now(self, names: Iterable[str] | None = None) -> Dict[str, Any]:
        """Ensure every identifier is registered, then resolve them.

        Args:
            names: Restrict resolution to these bound names.

        Returns:
            A mapping of bound name to resolved instance.
        """
        selected = list(self.bindings) if names is None else list(names)
        c = self._container
        for name in selected:
            ident = self.bindings[name]
            if not c.has(ident):
                c.register_component(ident)
        return {name: c.resolve(self.bindings[name]) for name in selected}

    def __call__(self, cls: type) -> type:
        original_init = cls.__init__
        pending = self
        plain = original_init is object.__init__ or getattr(original_init, "_drydock_plain", False)

        @functools.wraps(original_init)
        def __init__(inst, *args, **kwargs):
            missing = [n for n in pending.bindings if n not in kwargs]
            if missing:
                kwargs.update(pending.resolve_now(missing))
            if plain:
                for name in pending.bindings:
                    setattr(inst, name, kwargs.pop(name))
            original_init(inst, *args, **kwargs)

        __init__._drydock_plain = plain
        cls.__init__ = __init__
        setattr(cls, IMPORTS_ATTR, tuple(dict.fromkeys(getattr(cls, IMPORTS_ATTR, ()) + self.identifiers)))
        return cls

    def __repr__(self) -> str:
        return f"PendingImport({self.bindings!r})"
