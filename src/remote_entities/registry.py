"""Process-wide registry of declared entity types.

Every concrete :class:`~remote_entities.entity.Entity` subclass registers
itself here under its class name when its class body has been evaluated.
Associations resolve their target type through this registry, so related
types may be declared in any order as long as both exist before the
association is first used.

The registry is filled while modules are imported and is meant to be read
only afterwards; re-registering a name replaces the previous type and logs a
warning.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple, Union

from .errors import UnknownEntityError
from .models import AttributeDescriptor, EntitySchema

logger = logging.getLogger(__name__)

_entity_types: Dict[str, type] = {}


def register_entity_type(entity_type: type) -> None:
    """Register ``entity_type`` under its class name."""
    name = entity_type.__name__
    previous = _entity_types.get(name)
    if previous is not None and previous is not entity_type:
        logger.warning(
            f"Entity type {name} from {entity_type.__module__} replaces the one "
            f"declared in {previous.__module__}"
        )
    _entity_types[name] = entity_type


def unregister_entity_type(name: str) -> None:
    _entity_types.pop(name, None)


def get_entity_type(name: str) -> type:
    """Return the entity type registered as ``name``.

    Raises:
        UnknownEntityError: If no such type has been declared.
    """
    try:
        return _entity_types[name]
    except KeyError:
        raise UnknownEntityError(name) from None


def registered_entity_types() -> Dict[str, type]:
    """Snapshot of the registry, keyed by type name."""
    return dict(_entity_types)


def entity_types_in(module_name: str) -> List[type]:
    """Registered types declared in ``module_name`` (declaration order)."""
    return [t for t in _entity_types.values() if t.__module__ == module_name]


def schema_of(entity_type: Union[type, str]) -> EntitySchema:
    if isinstance(entity_type, str):
        entity_type = get_entity_type(entity_type)
    schema: Any = getattr(entity_type, "__entity_schema__", None)
    if schema is None:
        return EntitySchema(type_name=entity_type.__name__)
    return schema


def attributes_of(entity_type: Union[type, str]) -> Tuple[AttributeDescriptor, ...]:
    """Ordered attribute descriptors of an entity type (empty if none)."""
    return tuple(schema_of(entity_type).attributes)
