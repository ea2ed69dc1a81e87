"""Identifier resolution.

An identifier such as ``"persistence.user_repo"`` (or the equivalent
``"persistence/user_repo"``) names a component. A :class:`NamingStrategy`
turns it into a :class:`ComponentDescriptor`: the relative source file
expected to define the component and the name of the type that file must
expose. The default strategy maps segments to path segments and to CamelCase
type names with transforms that invert each other.
"""

import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, Tuple

from .constants import SOURCE_SUFFIX
from .exceptions import InvalidIdentifierError

_separator = re.compile(r"[./]")
_segment_pat = re.compile(r"^[a-z][a-z0-9]*(?:_[a-z][a-z0-9]*)*$")
_type_word_pat = re.compile(r"[A-Z][a-z0-9]*")


def camelize(segment: str) -> str:
    return "".join(word.capitalize() for word in segment.split("_"))


def underscore(type_name: str) -> str:
    return "_".join(word.lower() for word in _type_word_pat.findall(type_name))


@dataclass(frozen=True)
class ComponentDescriptor:
    """Computed view of an identifier.

    Attributes:
        identifier: Canonical (dot separated) identifier.
        segments: The identifier split into segments.
        file: Source file path, relative to a load path.
        module_name: Module name the source file is loaded under.
        type_name: Name of the type the module must define.
    """
    identifier: str
    segments: Tuple[str, ...]
    file: PurePosixPath
    module_name: str
    type_name: str

    @property
    def qualified_name(self) -> str:
        return f"{self.module_name}.{self.type_name}"

    @property
    def name(self) -> str:
        return self.segments[-1]


class NamingStrategy:
    """Protocol for identifier naming strategies.

    A strategy must be pure: the same identifier always yields the same
    descriptor, and :meth:`identifier_for` inverts :meth:`describe` for
    every identifier built from valid segments.
    """

    def split(self, identifier: Any) -> Tuple[str, ...]: ...

    def is_valid(self, identifier: Any) -> bool: ...

    def describe(self, identifier: Any) -> ComponentDescriptor: ...

    def identifier_for(self, relative_path: Any) -> str: ...

    def segment_for(self, type_name: str) -> str: ...


class DefaultNaming(NamingStrategy):
    """``a.b_c`` <-> ``a/b_c.py`` defining ``BC``."""

    def split(self, identifier: Any) -> Tuple[str, ...]:
        if not isinstance(identifier, str) or not identifier:
            raise InvalidIdentifierError(identifier)
        segments = tuple(_separator.split(identifier))
        for seg in segments:
            if not _segment_pat.match(seg):
                raise InvalidIdentifierError(identifier)
        return segments

    def is_valid(self, identifier: Any) -> bool:
        try:
            self.split(identifier)
        except InvalidIdentifierError:
            return False
        return True

    def describe(self, identifier: Any) -> ComponentDescriptor:
        segments = self.split(identifier)
        canonical = ".".join(segments)
        return ComponentDescriptor(
            identifier=canonical,
            segments=segments,
            file=PurePosixPath(*segments[:-1], segments[-1] + SOURCE_SUFFIX),
            module_name=canonical,
            type_name=camelize(segments[-1]),
        )

    def identifier_for(self, relative_path: Any) -> str:
        p = PurePosixPath(str(relative_path).replace("\\", "/"))
        if p.suffix == SOURCE_SUFFIX:
            p = p.with_suffix("")
        identifier = ".".join(p.parts)
        self.split(identifier)
        return identifier

    def segment_for(self, type_name: str) -> str:
        """Inverse of the type-name transform: ``UserRepo`` -> ``user_repo``."""
        return underscore(type_name)


DEFAULT_NAMING = DefaultNaming()


def describe(identifier: Any) -> ComponentDescriptor:
    return DEFAULT_NAMING.describe(identifier)
