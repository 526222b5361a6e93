"""Entity base class and declaration machinery.

An entity type declares its attributes, finders and associations in its class
body::

    from remote_entities import Attribute, Entity, find_one, has_many

    class User(Entity):
        id = Attribute("@nsid")
        username = Attribute()
        photos_url = Attribute("photosurl")

        find_by_id = find_one(call="people.getInfo", key="user_id")
        photosets = has_many()

When the class body has been evaluated, :class:`EntityMeta` has:

* built the type's :class:`~remote_entities.models.EntitySchema` (inheriting
  the base type's declarations),
* recorded a reader for every attribute and an operation for every finder and
  association in that schema,
* rejected any attribute name declared twice in the body,
* registered the type by name for association lookups.

Declarations may also be added after the fact with
:meth:`Entity.declare_attribute` and :meth:`Entity.declare_finder`.
"""

from __future__ import annotations

from typing import (
    Any,
    Callable,
    Dict,
    Mapping,
    Optional,
    Protocol,
    Tuple,
    TypeVar,
    runtime_checkable,
)

from .cache import ResultCache
from .errors import DeclarationError, DuplicateAttributeError
from .finders import Finder, finder_name, key_from_name
from .models import AttributeDescriptor, EntitySchema
from .populator import Document, populate_from
from .registry import register_entity_type

T = TypeVar("T")

AUTHENTICATION_KEYS = ("auth_token",)

_MISSING = object()


def extract_authentication_options(options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Credential entries of a construction options mapping."""
    if not options:
        return {}
    return {key: options[key] for key in AUTHENTICATION_KEYS if key in options}


@runtime_checkable
class SupportsEntity(Protocol):
    """Capabilities shared by every entity type."""

    attribute_values: Dict[str, Any]
    document: Optional[Document]
    authentication_options: Dict[str, Any]

    @classmethod
    def attributes(cls) -> Tuple[AttributeDescriptor, ...]: ...

    def populate_from(self, document: Document) -> Any: ...

    def with_caching(
        self, params_key: Any, operation_key: str, producer: Callable[[], T]
    ) -> T: ...


class Attribute:
    """Class-body declaration of an XML-sourced attribute.

    Args:
        source_path: ``tag``, ``@attr`` or ``tag@attr``; defaults to the name
            the attribute is bound to.
    """

    def __init__(self, source_path: Optional[str] = None) -> None:
        self.source_path = source_path
        self.name: Optional[str] = None

    def __set_name__(self, owner: type, name: str) -> None:
        schema: EntitySchema = owner.__entity_schema__
        if schema.readers.get(name) is self:
            return
        _check_reserved(owner.__name__, name)
        schema.add_attribute(AttributeDescriptor(name, self.source_path), reader=self)
        self.name = name

    def __get__(self, obj: Any, objtype: Optional[type] = None) -> Any:
        if obj is None:
            return self
        return obj.attribute_values.get(self.name)

    def __set__(self, obj: Any, value: Any) -> None:
        raise AttributeError(
            f"{type(obj).__name__}.{self.name} is read-only; use populate_from()"
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} from {self.source_path or self.name!r}>"


def _check_reserved(owner_name: str, name: str) -> None:
    if name in _RESERVED_NAMES:
        raise DeclarationError(f"{owner_name}.{name} clashes with an Entity member")


def _check_declarations(type_name: str, namespace: Mapping[str, Any]) -> None:
    """Validate class-body declarations before the class object exists.

    ``type.__new__`` wraps errors raised from ``__set_name__`` in a
    ``RuntimeError`` on Python < 3.12, so whatever can fail there is
    checked here first.
    """
    for name, value in namespace.items():
        if isinstance(value, Attribute):
            _check_reserved(type_name, name)
            AttributeDescriptor(name, value.source_path)
        elif isinstance(value, Finder) and value.key is None:
            key_from_name(value.kind, name)


class _DeclarationNamespace(dict):
    def __setitem__(self, key: str, value: Any) -> None:
        if isinstance(value, Attribute) and isinstance(self.get(key), Attribute):
            raise DuplicateAttributeError(self.get("__qualname__", "?"), key)
        super().__setitem__(key, value)


class EntityMeta(type):
    """Metaclass building the schema and registry entry of entity types."""

    @classmethod
    def __prepare__(mcs, name, bases, **kwargs):
        return _DeclarationNamespace()

    def __new__(mcs, name, bases, namespace, abstract: bool = False, **kwargs):
        if "__entity_schema__" in namespace:
            raise DeclarationError(
                f"Cannot create class {name!r}: __entity_schema__ is managed by EntityMeta"
            )
        _check_declarations(name, namespace)
        base_schema = next(
            (base.__entity_schema__ for base in bases if isinstance(base, EntityMeta)),
            None,
        )
        attrs = dict(namespace)
        attrs["__entity_schema__"] = EntitySchema.derive(name, base_schema)
        cls = super().__new__(mcs, name, bases, attrs, **kwargs)
        if not abstract:
            register_entity_type(cls)
        return cls

    def __init__(cls, name, bases, namespace, abstract: bool = False, **kwargs):
        super().__init__(name, bases, namespace, **kwargs)

    def __setattr__(cls, attr: str, value: Any) -> None:
        previous = cls.__dict__.get(attr, _MISSING)
        super().__setattr__(attr, value)
        if isinstance(value, type):
            return
        setname = getattr(value, "__set_name__", None)
        if setname is None:
            return
        try:
            setname(cls, attr)
        except Exception:
            # A rejected declaration must not stay bound on the type.
            if previous is _MISSING:
                super().__delattr__(attr)
            else:
                super().__setattr__(attr, previous)
            raise


class Entity(metaclass=EntityMeta, abstract=True):
    """Base class of domain objects populated from remote XML documents.

    Args:
        document: Optional parsed document to populate the new instance from.
        options: Construction options; recognized credential entries
            (``auth_token``) are kept as :attr:`authentication_options`.
    """

    __entity_schema__: EntitySchema

    identifier_attribute = "id"

    def __init__(
        self,
        document: Optional[Document] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.attribute_values: Dict[str, Any] = {}
        self.document: Optional[Document] = None
        self.authentication_options = extract_authentication_options(options)
        self._cache: Optional[ResultCache] = None
        if document is not None:
            self.populate_from(document)

    @classmethod
    def schema(cls) -> EntitySchema:
        return cls.__entity_schema__

    @classmethod
    def attributes(cls) -> Tuple[AttributeDescriptor, ...]:
        """Declared attribute descriptors, in declaration order."""
        return tuple(cls.__entity_schema__.attributes)

    @classmethod
    def declare_attribute(cls, name: str, source_path: Optional[str] = None) -> Attribute:
        """Add an attribute after the class has been defined.

        Raises:
            DuplicateAttributeError: If this type already declares ``name``.
            DeclarationError: If ``name`` or ``source_path`` is invalid; the
                type is left unchanged.
        """
        cls.__entity_schema__.check_attribute(name)
        _check_reserved(cls.__name__, name)
        attribute = Attribute(source_path)
        setattr(cls, name, attribute)
        return attribute

    @classmethod
    def declare_attributes(cls, *names: str) -> None:
        """Declare several plain-tag attributes at once."""
        for name in names:
            cls.declare_attribute(name)

    @classmethod
    def declare_finder(
        cls, kind: str, key: str, call: str, path: Optional[str] = None
    ) -> Finder:
        """Add a ``single`` or ``collection`` finder looking up by ``key``."""
        finder = Finder(kind, call, path=path, key=key)
        setattr(cls, finder_name(kind, key), finder)
        return finder

    def populate_from(self, document: Document) -> "Entity":
        """Merge attribute values from ``document``; existing values are kept."""
        return populate_from(self, document)

    @property
    def cache(self) -> ResultCache:
        if self._cache is None:
            self._cache = ResultCache()
        return self._cache

    def with_caching(
        self, params_key: Any, operation_key: str, producer: Callable[[], T]
    ) -> T:
        """Run ``producer`` once per (``operation_key``, ``params_key``) pair.

        Example:
            >>> photo.with_caching({}, "owner", lambda: User.find_by_id(photo.owner_id))
        """
        cache = self.cache
        return cache.fetch(cache.make_key(operation_key, params_key), producer)

    def to_dict(self) -> Dict[str, Any]:
        return {
            descriptor.name: self.attribute_values.get(descriptor.name)
            for descriptor in self.attributes()
        }

    def __repr__(self) -> str:
        populated = ", ".join(
            f"{name}={value!r}" for name, value in self.attribute_values.items()
        )
        return f"<{type(self).__name__} {populated}>"


_RESERVED_NAMES = frozenset(
    name for name in vars(Entity) if not name.startswith("__")
) | {"attribute_values", "document", "authentication_options"}
