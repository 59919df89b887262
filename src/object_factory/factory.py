from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any, TypedDict

from typing_extensions import Self

from object_factory.arguments import NO_ARGS, Arguments
from object_factory.errors import FactoryError, FactoryErrorKind
from object_factory.internal.type_map import TypeMap
from object_factory.internal.util.classes import (
    class_exists,
    class_reference,
    class_rejection_reason,
    interface_exists,
    is_instantiable,
    is_protocol,
    is_runtime_protocol,
    load_class,
    require_instantiable,
)
from object_factory.internal.util.config import validate_typed_dict
from object_factory.resolver import GenericResolver, ResolverOptions, TypeResolver

Callback = Callable[[Any], Any]


class FactoryConfig(TypedDict, total=False):
    """
    Construction options for a factory. Every key is optional.

    base_class: class or protocol every created object must be an instance of
    default_class: fallback class instantiated when a type cannot be resolved
    arguments: default constructor arguments (raw value or Arguments variant)
    callback: default hook called with every new object
    resolver: type identifier -> class reference function; a GenericResolver otherwise
    resolver_options: options for the default GenericResolver (ignored with `resolver`)
    map: type identifier -> class reference overrides
    entry_point_group: entry point group seeding the map; `map` entries win
    """

    base_class: str | type
    default_class: str | type
    arguments: Any
    callback: Callback
    resolver: TypeResolver
    resolver_options: ResolverOptions
    map: Mapping[str, str | type]
    entry_point_group: str


class FactoryInterface(ABC):
    @abstractmethod
    def create(
        self, type_id: str, args: Any = None, callback: Callback | None = None
    ) -> Any: ...

    @property
    @abstractmethod
    def base_class(self) -> str: ...

    @property
    @abstractmethod
    def default_class(self) -> str: ...

    @property
    @abstractmethod
    def arguments(self) -> Arguments | None: ...

    @property
    @abstractmethod
    def callback(self) -> Callback | None: ...


class AbstractFactory(FactoryInterface, ABC):
    """
    Full implementation of FactoryInterface.

    Types are resolved to class references through the type map first, then through an
    identity check (a type that already names a class is used as is), then through the
    resolver. Resolved references are cached per factory; `get()` also caches the objects.

    Usable as is. GenericFactory is the same behaviour under its public name; MapFactory
    and other subclasses override resolve() and is_resolvable().
    """

    def __init__(self, config: Mapping[str, Any] | None = None) -> None:
        cfg: Mapping[str, Any] = config if config is not None else {}
        validate_typed_dict("factory config", cfg, FactoryConfig)

        self._base_class: type | None = None
        self._base_class_ref = ""
        self._default_class: type | None = None
        self._default_class_ref = ""
        self._arguments: Arguments | None = None
        self._callback: Callback | None = None
        self._resolved: dict[str, str] = {}
        self._instances: dict[str, Any] = {}
        self._lock = threading.RLock()
        self._type_map = TypeMap()

        resolver = cfg.get("resolver")
        if resolver is None:
            resolver = GenericResolver.from_options(cfg.get("resolver_options"))
        self._set_resolver(resolver)

        if cfg.get("entry_point_group") is not None or cfg.get("map") is not None:
            seed: dict[str, Any] = {}
            if cfg.get("entry_point_group") is not None:
                seed.update(TypeMap.from_entry_points(cfg["entry_point_group"]).map())
            seed.update(cfg.get("map") or {})
            self.set_map(seed)

        if cfg.get("base_class") is not None:
            self.set_base_class(cfg["base_class"])
        if cfg.get("default_class") is not None:
            self.set_default_class(cfg["default_class"])
        if cfg.get("arguments") is not None:
            self.set_arguments(cfg["arguments"])
        if cfg.get("callback") is not None:
            self.set_callback(cfg["callback"])

    # -------------------------
    # creation
    # -------------------------

    def create(
        self, type_id: str, args: Any = None, callback: Callback | None = None
    ) -> Any:
        """
        Create a new object of the requested type. Never cached.

        Args:
            type_id: type identifier or class reference.
            args: constructor arguments, overriding the factory defaults when not None.
            callback: called with the new object after the factory callback.

        Raises:
            FactoryError: BAD_TYPE for a non-string type, UNRESOLVED_TYPE when the type
                cannot be resolved and there is no default class,
                CLASS_CONSTRAINT_VIOLATION when the object is not a base class instance.
        """
        if not isinstance(type_id, str):
            raise FactoryError.from_bad_type(type_id)
        if callback is not None and not callable(callback):
            raise FactoryError.from_bad_argument("callback", callback, "callable")

        arguments = self._arguments if args is None else Arguments.of(args)

        with self._lock:
            class_ref = self._resolved.get(type_id)

        if class_ref is not None:
            logging.debug(f"[{self._name}] cached class for {type_id!r}: {class_ref}")
        else:
            if not self.is_resolvable(type_id):
                if self._default_class is None:
                    raise FactoryError.from_unresolved_type(
                        type_id, factory=self._name, default_class=self._default_class_ref
                    )
                # The base class is not enforced on the fallback path.
                logging.warning(
                    f"[{self._name}] type {type_id!r} is not resolvable, "
                    f"using default class {self._default_class_ref}"
                )
                obj = self._create_class(self._default_class, arguments)
                self._run_callbacks(obj, callback)
                return obj

            class_ref = self.resolve(type_id)

        obj = self._create_class(require_instantiable(class_ref), arguments)

        if self._base_class is not None and not isinstance(obj, self._base_class):
            raise FactoryError.from_rejected_class(
                class_ref, self._base_class_ref, factory=self._name, type_id=type_id
            )

        with self._lock:
            self._resolved.setdefault(type_id, class_ref)

        self._run_callbacks(obj, callback)
        return obj

    def get(self, type_id: str, args: Any = None) -> Any:
        """
        Return the shared object for a type, creating it on first use.

        Once an object exists for the type, later `args` are ignored.

        The factory lock is held while the object is constructed and its callbacks run,
        so concurrent callers share one instance. A constructor or callback may call
        back into this factory on the same thread, but must not wait on another thread
        that uses it: that deadlocks.
        """
        if not isinstance(type_id, str):
            raise FactoryError.from_bad_type(type_id)

        with self._lock:
            obj = self._instances.get(type_id)
            if obj is None:
                obj = self.create(type_id, args)
                self._instances[type_id] = obj
            else:
                logging.debug(f"[{self._name}] cached instance for {type_id!r}")
            return obj

    def _create_class(self, klass: type, arguments: Arguments | None) -> Any:
        return (arguments or NO_ARGS).apply(klass)

    def _run_callbacks(self, obj: Any, custom_callback: Callback | None = None) -> None:
        if self._callback is not None:
            self._callback(obj)
        if custom_callback is not None:
            custom_callback(obj)

    # -------------------------
    # resolution
    # -------------------------

    def resolve(self, type_id: str) -> str:
        """
        Resolve a type identifier to a class reference.

        The resolver output is returned unverified; use is_resolvable() to check it.
        """
        candidate = self._map_candidate(type_id)

        if class_exists(candidate):
            logging.debug(f"[{self._name}] {type_id!r} names a class: {candidate}")
            return candidate

        resolved = self._call_resolver(candidate)
        logging.debug(f"[{self._name}] resolver: {type_id!r} -> {resolved!r}")
        return resolved

    def is_resolvable(self, type_id: str) -> bool:
        candidate = self._map_candidate(type_id)

        if is_instantiable(candidate):
            return True

        return is_instantiable(self._call_resolver(candidate))

    def _map_candidate(self, type_id: Any) -> str:
        if not isinstance(type_id, str) or not type_id:
            raise FactoryError.from_bad_type(type_id)
        mapped = self._type_map.get(type_id)
        if mapped is not None:
            logging.debug(f"[{self._name}] map hit: {type_id!r} -> {mapped}")
            return mapped
        return type_id

    def _call_resolver(self, candidate: str) -> str:
        resolved = self._resolver(candidate)
        if not isinstance(resolved, str):
            raise FactoryError.from_bad_argument("resolver result", resolved, "a string")
        return resolved

    def _resolve_setter_reference(
        self, class_ref: str, exists: Callable[[str], bool]
    ) -> str | None:
        if exists(class_ref):
            return class_ref
        try:
            resolved = self.resolve(class_ref)
        except FactoryError as e:
            if e.kind is not FactoryErrorKind.UNRESOLVED_TYPE:
                raise
            return None
        return resolved if exists(resolved) else None

    # -------------------------
    # configuration
    # -------------------------

    @property
    def _name(self) -> str:
        return type(self).__name__

    @property
    def resolver(self) -> TypeResolver:
        return self._resolver

    def _set_resolver(self, resolver: TypeResolver) -> None:
        if not callable(resolver):
            raise FactoryError.from_bad_argument("resolver", resolver, "callable")
        self._resolver = resolver

    @property
    def map(self) -> dict[str, str]:
        return self._type_map.map()

    def set_map(self, mapping: Mapping[str, Any]) -> Self:
        """Replace the type map. Entries are validated before anything is replaced."""
        self._type_map.set_map(mapping)
        return self

    def add_class_to_map(self, type_id: str, class_ref: str | type) -> Self:
        self._type_map.add_class_to_map(type_id, class_ref)
        return self

    @property
    def base_class(self) -> str:
        return self._base_class_ref

    def set_base_class(self, base_class: str | type) -> Self:
        """
        Require every created object to be an instance of a class or protocol.

        Accepts a class, a class reference or a type identifier. Protocols must be
        runtime_checkable.
        """
        if isinstance(base_class, type):
            klass, class_ref = base_class, class_reference(base_class)
        else:
            class_ref = self._assert_class_name("base class", base_class)
            resolved = self._resolve_setter_reference(class_ref, interface_exists)
            if resolved is None:
                raise FactoryError.from_invalid_base_class(class_ref)
            klass, class_ref = load_class(resolved), resolved

        if is_protocol(klass) and not is_runtime_protocol(klass):
            raise FactoryError.from_invalid_base_class(
                class_ref, "is a protocol that is not runtime_checkable"
            )

        self._base_class, self._base_class_ref = klass, class_ref
        return self

    @property
    def default_class(self) -> str:
        return self._default_class_ref

    def set_default_class(self, default_class: str | type) -> Self:
        """
        Set the class created for types that cannot be resolved.

        Accepts a class, a class reference or a type identifier. The class must be
        concrete.
        """
        if isinstance(default_class, type):
            klass, class_ref = default_class, class_reference(default_class)
        else:
            class_ref = self._assert_class_name("default class", default_class)
            resolved = self._resolve_setter_reference(class_ref, class_exists)
            if resolved is None:
                raise FactoryError.from_invalid_default_class(class_ref)
            klass, class_ref = load_class(resolved), resolved

        reason = class_rejection_reason(klass)
        if reason is not None:
            raise FactoryError.from_invalid_default_class(class_ref, reason)

        self._default_class, self._default_class_ref = klass, class_ref
        return self

    @property
    def arguments(self) -> Arguments | None:
        return self._arguments

    def set_arguments(self, arguments: Any) -> Self:
        """Set default constructor arguments; None clears them."""
        self._arguments = None if arguments is None else Arguments.of(arguments)
        return self

    @property
    def callback(self) -> Callback | None:
        return self._callback

    def set_callback(self, callback: Callback) -> Self:
        if not callable(callback):
            raise FactoryError.from_bad_argument("callback", callback, "callable")
        self._callback = callback
        return self

    @staticmethod
    def _assert_class_name(desc: str, class_name: Any) -> str:
        if not isinstance(class_name, str) or not class_name:
            raise FactoryError.from_bad_argument(
                desc, class_name, "a non-empty string or a class"
            )
        return class_name


class GenericFactory(AbstractFactory):
    """
    Factory resolving types through the map, exact class references and the resolver.
    """
