from __future__ import annotations

from typing import TYPE_CHECKING

from ._reflection import display_name


if TYPE_CHECKING:
    from collections.abc import Iterable


class ResolutionError(RuntimeError):
    """Base class for every failure raised while resolving a service."""


class NotBuildableError(ResolutionError):
    """The concrete bound to an abstract is neither a factory nor a constructible class."""

    def __init__(self, abstract: object) -> None:
        self.abstract = abstract
        super().__init__(f"Service {display_name(abstract)} is not buildable.")


class UnresolvableParameterError(ResolutionError):
    """A constructor parameter has no override, no usable type and no default."""

    def __init__(self, parameter: str, owner: type) -> None:
        self.parameter = parameter
        self.owner = owner
        super().__init__(
            f"Cannot resolve constructor parameter '{parameter}' of {owner.__qualname__}: "
            "no override, binding or default found."
        )


class CircularDependencyError(ResolutionError):
    """A service depends on itself through its constructors or factories."""

    def __init__(self, chain: Iterable[object]) -> None:
        self.chain = tuple(chain)
        self.abstract = self.chain[0]
        path = " -> ".join(display_name(item) for item in self.chain)
        super().__init__(f"Circular dependency detected: {path}")
