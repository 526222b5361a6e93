"""Generated type-level lookup operations.

A finder is declared in the class body under a conventional name; the lookup
key is taken from that name::

    class User(Entity):
        find_by_id = find_one(call="people.getInfo")
        find_by_username = find_one(call="people.findByUsername")

    class Photoset(Entity):
        find_all_by_user_id = find_all(call="photosets.getList", path="photosets/photoset")

``User.find_by_id("1")`` sends ``{"id": "1"}`` to ``people.getInfo`` and builds
a ``User`` from the response body. ``Photoset.find_all_by_user_id("1")``
builds one ``Photoset`` per matched fragment. Both accept an optional mapping
of extra parameters, which is also handed to the constructor (so that an
``auth_token`` in it is retained by the new instances).
"""

from __future__ import annotations

import logging
import re
import types
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Mapping, Optional

from .client import ENVELOPE_TAG, get_client
from .errors import DeclarationError
from .models import COLLECTION, SINGLE, FinderDescriptor
from .populator import Document, root_of

logger = logging.getLogger(__name__)

_NAME_PATTERNS = {
    SINGLE: re.compile(r"^find_by_(?P<key>\w+)$"),
    COLLECTION: re.compile(r"^find_all_by_(?P<key>\w+)$"),
}


def finder_name(kind: str, key: str) -> str:
    prefix = "find_all_by" if kind == COLLECTION else "find_by"
    return f"{prefix}_{key}"


def key_from_name(kind: str, name: str) -> str:
    """Extract the lookup key from a conventional finder name.

    Raises:
        DeclarationError: If ``name`` does not follow the convention for ``kind``.
    """
    pattern = _NAME_PATTERNS.get(kind)
    match = pattern.match(name) if pattern else None
    if match is None:
        raise DeclarationError(
            f"A {kind} finder must be named {finder_name(kind, '<key>')!r}, got {name!r}"
        )
    return match.group("key")


def build_params(key: str, value: Any, params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Merge caller parameters with the lookup key, which always wins."""
    merged = dict(params or {})
    merged[key] = value
    return merged


def select_fragments(body: Document, path: Optional[str] = None) -> List[ET.Element]:
    """Elements of ``body`` that each describe one entity.

    With a ``path`` the fragments are ``body.findall(path)``. Without one they
    are the children of the payload element: the first child of an ``rsp``
    envelope, or the body itself otherwise.
    """
    root = root_of(body)
    if path:
        return root.findall(path)
    payload: Optional[ET.Element] = root
    if root.tag == ENVELOPE_TAG:
        payload = next(iter(root), None)
    return list(payload) if payload is not None else []


def find_single(
    entity_type: type,
    finder: FinderDescriptor,
    value: Any,
    params: Optional[Mapping[str, Any]] = None,
) -> Any:
    merged = build_params(finder.key, value, params)
    logger.debug(f"{entity_type.__name__}.{finder.name} -> {finder.call}")
    response = get_client().call(finder.call, merged)
    return entity_type(response.body, merged)


def find_collection(
    entity_type: type,
    finder: FinderDescriptor,
    value: Any,
    params: Optional[Mapping[str, Any]] = None,
) -> List[Any]:
    merged = build_params(finder.key, value, params)
    logger.debug(f"{entity_type.__name__}.{finder.name} -> {finder.call}")
    response = get_client().call(finder.call, merged)
    fragments = select_fragments(response.body, finder.path)
    return [entity_type(fragment, merged) for fragment in fragments]


_OPERATIONS = {SINGLE: find_single, COLLECTION: find_collection}


class Finder:
    """Class-body declaration of a finder.

    Accessing the finder on the class (or an instance) returns the generated
    operation bound to the owning type.
    """

    def __init__(
        self, kind: str, call: str, path: Optional[str] = None, key: Optional[str] = None
    ) -> None:
        if kind not in _OPERATIONS:
            raise DeclarationError(f"Unknown finder kind {kind!r}")
        self.kind = kind
        self.call = call
        self.path = path
        self.key = key
        self.descriptor: Optional[FinderDescriptor] = None

    def __set_name__(self, owner: type, name: str) -> None:
        key = self.key or key_from_name(self.kind, name)
        self.descriptor = FinderDescriptor(
            name=name, kind=self.kind, key=key, call=self.call, path=self.path
        )
        self.__doc__ = f"Find {owner.__name__} by {key} via {self.call}."
        owner.__entity_schema__.add_finder(self.descriptor, _OPERATIONS[self.kind])

    def __get__(self, obj: Any, objtype: Optional[type] = None) -> Any:
        if self.descriptor is None:
            raise DeclarationError(f"{self!r} was never bound to an entity type")
        owner = objtype if objtype is not None else type(obj)
        operation = _OPERATIONS[self.kind]
        descriptor = self.descriptor

        def finder(entity_type: type, value: Any, params: Optional[Mapping[str, Any]] = None):
            return operation(entity_type, descriptor, value, params)

        finder.__name__ = descriptor.name
        finder.__doc__ = self.__doc__
        return types.MethodType(finder, owner)

    def __repr__(self) -> str:
        name = self.descriptor.name if self.descriptor else "<unbound>"
        return f"<{type(self).__name__} {name} call={self.call!r}>"


def find_one(call: str, key: Optional[str] = None) -> Finder:
    """Declare a single-entity finder (``find_by_<key>``)."""
    return Finder(SINGLE, call, key=key)


def find_all(call: str, path: Optional[str] = None, key: Optional[str] = None) -> Finder:
    """Declare a collection finder (``find_all_by_<key>``)."""
    return Finder(COLLECTION, call, path=path, key=key)
