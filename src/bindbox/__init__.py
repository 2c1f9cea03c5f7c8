"""Reflection-driven dependency injection container.

This package binds abstract identifiers (classes, string keys or dotted type
names) to construction strategies and resolves fully constructed object
graphs, wiring constructor dependencies from their type hints.

Exports:
- `Container`: registers transient/singleton bindings and pre-built instances,
  and resolves them with `get`/`make`.
- `ResolutionError`: base class of every resolution failure.
- `NotBuildableError`: the concrete is neither a factory nor a constructible class.
- `UnresolvableParameterError`: a constructor parameter cannot be satisfied.
- `CircularDependencyError`: a service depends on itself through its constructors.
"""

from ._container import Container
from ._errors import (
    CircularDependencyError,
    NotBuildableError,
    ResolutionError,
    UnresolvableParameterError,
)


__all__ = [
    "CircularDependencyError",
    "Container",
    "NotBuildableError",
    "ResolutionError",
    "UnresolvableParameterError",
]
