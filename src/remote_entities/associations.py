"""Instance-level accessors for related entities.

``has_many`` declares an accessor that loads the related collection through
the target type's collection finder, keyed by the owner's identifier::

    class User(Entity):
        id = Attribute("@nsid")
        photosets = has_many()

    class Photoset(Entity):
        find_all_by_user_id = find_all(call="photosets.getList", path="photosets/photoset")

    user.photosets({"per_page": "100"})
    # == Photoset.find_all_by_user_id(user.id, {**user.authentication_options, "per_page": "100"})

The target type name and the finder name follow from the declaration by
convention (see :mod:`remote_entities.inflections`); ``target=`` and
``finder=`` override them. Results are memoized in the owner's result cache,
keyed by the accessor name and the caller's parameters.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, List, Mapping, Optional

from .errors import ConfigurationError
from .inflections import classify, foreign_key
from .models import AssociationDescriptor
from .registry import get_entity_type

logger = logging.getLogger(__name__)


def load_association(
    entity: Any, association: AssociationDescriptor, params: Optional[Mapping[str, Any]] = None
) -> List[Any]:
    """Call the target finder for ``entity``, bypassing the result cache."""
    target_type = get_entity_type(association.target)
    finder = getattr(target_type, association.finder, None)
    if finder is None:
        raise ConfigurationError(
            f"{association.target} has no {association.finder} finder "
            f"for association {type(entity).__name__}.{association.name}"
        )
    identifier_attribute = type(entity).identifier_attribute
    identifier = getattr(entity, identifier_attribute, None)
    if identifier is None:
        raise ConfigurationError(
            f"Cannot load {type(entity).__name__}.{association.name}: "
            f"{identifier_attribute!r} is not populated"
        )
    merged = dict(entity.authentication_options)
    merged.update(params or {})
    logger.debug(
        f"Loading {type(entity).__name__}.{association.name} "
        f"via {association.target}.{association.finder}({identifier!r})"
    )
    return finder(identifier, merged)


def fetch_association(
    entity: Any, association: AssociationDescriptor, params: Optional[Mapping[str, Any]] = None
) -> List[Any]:
    params = dict(params or {})
    return entity.with_caching(
        params, association.name, lambda: load_association(entity, association, params)
    )


class Association:
    """Class-body declaration of a has-many association."""

    def __init__(self, target: Optional[str] = None, finder: Optional[str] = None) -> None:
        self.target = target
        self.finder = finder
        self.descriptor: Optional[AssociationDescriptor] = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.descriptor = AssociationDescriptor(
            name=name,
            target=self.target or classify(name),
            finder=self.finder or f"find_all_by_{foreign_key(owner.__name__)}",
        )
        self.__doc__ = f"The {self.descriptor.target} entities of this {owner.__name__}."
        owner.__entity_schema__.add_association(self.descriptor, fetch_association)

    def __get__(self, obj: Any, objtype: Optional[type] = None) -> Any:
        if obj is None:
            return self
        return functools.partial(fetch_association, obj, self.descriptor)

    def __repr__(self) -> str:
        if self.descriptor is None:
            return f"<{type(self).__name__} <unbound>>"
        return f"<{type(self).__name__} {self.descriptor.name} -> {self.descriptor.target}>"


def has_many(target: Optional[str] = None, finder: Optional[str] = None) -> Association:
    """Declare a has-many association."""
    return Association(target=target, finder=finder)
