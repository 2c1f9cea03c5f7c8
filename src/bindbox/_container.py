from __future__ import annotations

import inspect
import logging
import threading
from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    Any,
    TypeVar,
    overload,
)

from ._errors import CircularDependencyError, NotBuildableError, UnresolvableParameterError
from ._reflection import (
    constructor_hints,
    display_name,
    has_constructor,
    is_builtin_type,
    is_constructible,
    is_typing_construct,
    locate_type,
    unwrap_optional,
)


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    T = TypeVar("T")

    Identifier = type | str
    # A class, the dotted name of a class, or a factory(container, parameters)
    Concrete = type | str | Callable[..., object]


@dataclass(frozen=True)
class Binding:
    concrete: Concrete
    shared: bool = False


class Container:
    """Reflection-driven DI container.

    - bind abstracts (classes or string keys) as transient or singleton
    - register pre-built instances
    - resolve with constructor injection from type hints
    - unregistered concrete classes and dotted type names auto-wire.
    """

    def __init__(self) -> None:
        self._bindings: dict[Identifier, Binding] = {}
        self._instances: dict[Identifier, object] = {}
        self._building: list[Identifier] = []
        self._lock = threading.RLock()

    def transient(self, abstract: Identifier, concrete: Concrete | None = None) -> None:
        """Register a service that is built anew on every resolution.

        Example:
          container.transient(RequestHandler)
          container.transient(Mailer, SmtpMailer)
          container.transient("clock", lambda c: SystemClock())

        """
        self._bind(abstract, concrete, shared=False)

    def singleton(self, abstract: Identifier, concrete: Concrete | None = None) -> None:
        """Register a service that is built once and then reused."""
        self._bind(abstract, concrete, shared=True)

    def _bind(self, abstract: Identifier, concrete: Concrete | None, *, shared: bool) -> None:
        with self._lock:
            # Rebinding invalidates whatever was cached for the abstract
            self._instances.pop(abstract, None)
            self._bindings[abstract] = Binding(concrete=abstract if concrete is None else concrete, shared=shared)

        logger.debug("Bound %s (shared=%s)", display_name(abstract), shared)

    def instance(self, abstract: Identifier, instance: object) -> None:
        """Register a pre-built object, returned as-is until the abstract is rebound."""
        with self._lock:
            self._instances[abstract] = instance

        logger.debug("Registered instance of %s for %s", type(instance).__name__, display_name(abstract))

    @overload
    def get(self, abstract: type[T]) -> T: ...

    @overload
    def get(self, abstract: str) -> Any: ...

    def get(self, abstract: Identifier) -> Any:
        """Resolve a service."""
        return self._resolve(abstract)

    @overload
    def make(self, abstract: type[T], parameters: Mapping[str, Any] | None = ...) -> T: ...

    @overload
    def make(self, abstract: str, parameters: Mapping[str, Any] | None = ...) -> Any: ...

    def make(self, abstract: Identifier, parameters: Mapping[str, Any] | None = None) -> Any:
        """Resolve a service, passing explicit constructor arguments.

        `parameters` maps constructor parameter names to values used verbatim.
        Any non-empty mapping forces a fresh build that never touches the
        instance cache.
        """
        return self._resolve(abstract, parameters)

    def has(self, abstract: Identifier) -> bool:
        """Check whether a binding or an instance exists for the abstract."""
        return abstract in self._bindings or abstract in self._instances

    def bound(self, abstract: Identifier) -> bool:
        """Check the binding table only, ignoring registered instances."""
        return abstract in self._bindings

    def __contains__(self, abstract: object) -> bool:
        return self.has(abstract)  # type: ignore[arg-type]

    def _resolve(self, abstract: Identifier, parameters: Mapping[str, Any] | None = None) -> Any:
        """Resolve the abstract to an object.

        - cached instance and no parameters: return it.
        - bound: build the bound concrete; unbound: build the abstract itself.
        - shared abstracts resolved without parameters are cached.
        """
        parameters = dict(parameters or {})

        with self._lock:
            if not parameters and abstract in self._instances:
                return self._instances[abstract]

            strategy = self._buildable(abstract, self._concrete(abstract))

            if abstract in self._building:
                start = self._building.index(abstract)
                raise CircularDependencyError([*self._building[start:], abstract])

            self._building.append(abstract)
            try:
                service = self._build(strategy, parameters)
            finally:
                self._building.pop()

            if not parameters and self._is_shared(abstract):
                self._instances[abstract] = service

            return service

    def _concrete(self, abstract: Identifier) -> Concrete:
        binding = self._bindings.get(abstract)
        return abstract if binding is None else binding.concrete

    def _is_shared(self, abstract: Identifier) -> bool:
        binding = self._bindings.get(abstract)
        return abstract in self._instances or (binding is not None and binding.shared)

    def _buildable(self, abstract: Identifier, concrete: Concrete) -> type | Callable[..., object]:
        """Turn a concrete into a class to construct or a factory to call."""
        if isinstance(concrete, str):
            concrete = locate_type(concrete)

        if inspect.isclass(concrete):
            if is_constructible(concrete):
                return concrete
        elif callable(concrete):
            return concrete

        raise NotBuildableError(abstract)

    def _build(self, strategy: type | Callable[..., object], parameters: dict[str, Any]) -> object:
        if inspect.isclass(strategy):
            logger.debug("Constructing %s", strategy.__qualname__)
            return Constructor(self).construct(strategy, parameters)

        return self._call_factory(strategy, parameters)

    def _call_factory(self, factory: Callable[..., object], parameters: dict[str, Any]) -> object:
        """Call factory(container, parameters), trimming arguments the factory does not declare."""
        try:
            sig = inspect.signature(factory)
        except (TypeError, ValueError):
            return factory(self, parameters)

        params = sig.parameters.values()
        if any(p.kind is p.VAR_POSITIONAL for p in params):
            return factory(self, parameters)

        positional = [p for p in params if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)]
        return factory(*(self, parameters)[: len(positional)])

    def resolve_param(
        self,
        cls: type,
        p: inspect.Parameter,
        annotation: Any,
        parameters: Mapping[str, Any],
    ) -> Any:
        """Resolving param.

        Resolution precedence:
        1. explicit override
        2. bound (or instance-registered) type
        3. auto-wired concrete class
        4. default
        5. error.
        """
        # 1) override, used verbatim
        if p.name in parameters:
            return parameters[p.name]

        # 2) + 3) typed dependency; builtins are config values, never services
        annotation = unwrap_optional(annotation)
        if (
            annotation is not inspect.Parameter.empty
            and not is_builtin_type(annotation)
            and not is_typing_construct(annotation)
        ):
            if isinstance(annotation, str) or inspect.isclass(annotation):
                if self.has(annotation):
                    return self.get(annotation)

                if isinstance(annotation, str):
                    target = locate_type(annotation)
                    if target is not None and is_constructible(target):
                        return self.make(annotation)
                elif is_constructible(annotation):
                    return self.make(annotation)

        # 4) default
        if p.default is not inspect.Parameter.empty:
            return p.default

        # 5) error
        raise UnresolvableParameterError(p.name, cls)


class Constructor:
    def __init__(self, resolver: Container) -> None:
        self._resolver = resolver

    def construct(self, cls: type[T], parameters: dict[str, Any]) -> T:
        if not has_constructor(cls):
            return cls()

        sig = inspect.signature(cls)
        hints = constructor_hints(cls)

        arguments = self._fill_arguments(cls, sig, hints, parameters)
        args, kwargs = self._materialize_call(sig, arguments)

        # Overrides that name no parameter can only go through **kwargs
        if any(p.kind is p.VAR_KEYWORD for p in sig.parameters.values()):
            kwargs.update({k: v for k, v in parameters.items() if k not in sig.parameters})

        return cls(*args, **kwargs)

    def _fill_arguments(
        self,
        cls: type,
        sig: inspect.Signature,
        hints: dict[str, Any],
        parameters: dict[str, Any],
    ) -> dict[str, Any]:
        arguments: dict[str, Any] = {}

        for name, p in sig.parameters.items():
            if p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD):
                continue

            annotation = hints.get(name, p.annotation)
            arguments[name] = self._resolver.resolve_param(cls, p, annotation, parameters)

        return arguments

    def _materialize_call(
        self, sig: inspect.Signature, arguments: dict[str, Any]
    ) -> tuple[list[Any], dict[str, Any]]:
        args, kwargs = [], {}

        for name, p in sig.parameters.items():
            if p.kind is p.POSITIONAL_ONLY:
                args.append(arguments[name])
            elif p.kind in (p.POSITIONAL_OR_KEYWORD, p.KEYWORD_ONLY):
                kwargs[name] = arguments[name]

        return args, kwargs
