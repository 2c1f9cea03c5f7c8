"""Runtime type introspection used by the container.

Everything the container needs to know about a class lives here: whether a
dotted name points at a class, whether a class can be instantiated at all,
whether it declares a constructor, and which types that constructor expects.
"""

from __future__ import annotations

import enum
import inspect
import logging
import pkgutil
import types
import typing
from typing import Any, get_type_hints


logger = logging.getLogger(__name__)


def display_name(identifier: object) -> str:
    if inspect.isclass(identifier):
        return identifier.__qualname__
    return repr(identifier)


def locate_type(name: str) -> type | None:
    """Return the class a dotted name points at, or None.

    Accepts both ``"pkg.module.Class"`` and ``"pkg.module:Class"``. Names that
    cannot be imported, or that point at something other than a class, yield
    None.
    """
    try:
        found = pkgutil.resolve_name(name)
    except (ImportError, AttributeError, ValueError):
        return None

    return found if inspect.isclass(found) else None


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def is_protocol(tp: object) -> bool:
        return inspect.isclass(tp) and typing.is_protocol(tp)

else:

    def is_protocol(tp: object) -> bool:
        """Detect whether 'tp' is a typing.Protocol class (safe)."""
        return inspect.isclass(tp) and bool(getattr(tp, "_is_protocol", False)) and tp is not typing.Protocol


def is_builtin_type(tp: object) -> bool:
    """True for the classes of the ``builtins`` module (int, str, dict, ...)."""
    return inspect.isclass(tp) and tp.__module__ == "builtins"


def is_typing_construct(tp: object) -> bool:
    """True for ``Any`` and the other special forms of the ``typing`` module.

    From Python 3.11 ``typing.Any`` is a class, but it names no type to build.
    """
    return tp is Any or getattr(tp, "__module__", None) == "typing"


def unwrap_optional(annotation: object) -> object:
    """Return ``T`` for ``Optional[T]`` / ``T | None``, else the annotation unchanged."""
    if typing.get_origin(annotation) not in (typing.Union, types.UnionType):
        return annotation

    args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
    if len(args) == 1:
        return args[0]
    return annotation


def is_constructible(tp: object) -> bool:
    """True when 'tp' is a class that can be instantiated directly.

    Abstract base classes and protocols describe interfaces; they only become
    buildable through a binding. Enums are closed sets of values, never services.
    """
    return (
        inspect.isclass(tp)
        and not inspect.isabstract(tp)
        and not is_protocol(tp)
        and not is_typing_construct(tp)
        and not issubclass(tp, enum.Enum)
    )


def has_constructor(cls: type) -> bool:
    """False when neither ``__init__`` nor ``__new__`` is overridden anywhere in the MRO."""
    return cls.__init__ is not object.__init__ or cls.__new__ is not object.__new__


def constructor_hints(cls: type) -> dict[str, Any]:
    """Evaluated type hints of the constructor of 'cls', without 'return'.

    Forward references that cannot be evaluated produce an empty mapping; the
    caller then falls back to the raw annotations of the signature.
    """
    name = "__init__" if cls.__init__ is not object.__init__ else "__new__"
    try:
        func = inspect.getattr_static(cls, name)
        if isinstance(func, (staticmethod, classmethod)):
            func = func.__func__
        hints = get_type_hints(func)
    except TypeError:
        hints = {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s (%s) type hints", exc.name, cls.__name__, cls.__qualname__)
        hints = {}

    hints.pop("return", None)
    return hints
