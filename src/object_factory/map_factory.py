from __future__ import annotations

from object_factory.errors import FactoryError
from object_factory.factory import AbstractFactory
from object_factory.internal.util.classes import is_instantiable


class MapFactory(AbstractFactory):
    """
    Factory that only knows the types in its map.

    Neither the resolver nor exact class references are consulted: a type that is not a
    map key is not resolvable, and `resolve()` raises UNRESOLVED_TYPE for it.
    """

    def resolve(self, type_id: str) -> str:
        class_ref = self._type_map.get(self._assert_type_id(type_id))
        if class_ref is None:
            raise FactoryError.from_unresolved_type(type_id, factory=self._name)
        return class_ref

    def is_resolvable(self, type_id: str) -> bool:
        class_ref = self._type_map.get(self._assert_type_id(type_id))
        return class_ref is not None and is_instantiable(class_ref)

    @staticmethod
    def _assert_type_id(type_id: object) -> str:
        if not isinstance(type_id, str) or not type_id:
            raise FactoryError.from_bad_type(type_id)
        return type_id
