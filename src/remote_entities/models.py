"""Core data structures describing entity types.

These dataclasses are the declarative metadata produced while an entity class
is defined and consumed by the populator, the finder generator and the
association accessor. They carry no remote behavior of their own, so they can
be inspected, printed or serialized freely.

Overview:
        * ``SourcePath`` is the parsed form of an attribute's location inside an
            XML document (plain tag, ``@attr`` on the root node, ``tag@attr``).
        * ``AttributeDescriptor`` names one field exposed by an entity type.
        * ``FinderDescriptor`` and ``AssociationDescriptor`` record generated
            type-level and instance-level operations.
        * ``EntitySchema`` is the per-type registry holding all of the above in
            declaration order, plus the dispatch table of generated operations.

Typical construction (simplified)::

        from remote_entities.models import AttributeDescriptor, EntitySchema

        schema = EntitySchema(type_name="Photo")
        schema.add_attribute(AttributeDescriptor("title"))
        schema.add_attribute(AttributeDescriptor("id", "@id"))
        [a.name for a in schema.attributes]   # ['title', 'id']

Design notes:
        * Descriptors are frozen; a schema is only extended while its type is
            being declared and is read-only afterwards.
        * A derived schema starts from a copy of its base schema. Redeclaring an
            inherited attribute replaces it in place, so declaration order stays
            stable across a class hierarchy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from .errors import DeclarationError, DuplicateAttributeError

SINGLE = "single"
COLLECTION = "collection"
FINDER_KINDS = (SINGLE, COLLECTION)


@dataclass(frozen=True)
class SourcePath:
    """Location of a value inside an XML document.

    Attributes:
        tag: Element tag to search for among the document's descendants, or
            ``None`` to address the document's own root node.
        attribute: Attribute to read from the located node, or ``None`` to read
            the node's text content.

    Example:
        >>> SourcePath.parse("photoset@id")
        SourcePath(tag='photoset', attribute='id')
        >>> SourcePath.parse("@nsid")
        SourcePath(tag=None, attribute='nsid')
    """

    tag: Optional[str]
    attribute: Optional[str] = None

    @classmethod
    def parse(cls, raw: str) -> "SourcePath":
        """Parse ``tag``, ``@attr`` or ``tag@attr``.

        Raises:
            DeclarationError: If the path is empty or names an empty attribute.
        """
        if not raw:
            raise DeclarationError("Source path must not be empty")
        if "@" not in raw:
            return cls(tag=raw)
        tag, _, attribute = raw.partition("@")
        if not attribute or "@" in attribute:
            raise DeclarationError(f"Invalid attribute reference in {raw!r}")
        return cls(tag=tag or None, attribute=attribute)

    def __str__(self) -> str:
        if self.attribute is None:
            return self.tag or ""
        return f"{self.tag or ''}@{self.attribute}"


@dataclass(frozen=True)
class AttributeDescriptor:
    """A single field exposed by an entity type.

    Attributes:
        name: Reader name exposed on instances.
        source_path: Raw location string; defaults to ``name`` (a tag lookup).
        path: Parsed :class:`SourcePath`, derived from ``source_path``.
    """

    name: str
    source_path: Optional[str] = None
    path: SourcePath = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.name.isidentifier():
            raise DeclarationError(f"Invalid attribute name: {self.name!r}")
        if self.source_path is None:
            object.__setattr__(self, "source_path", self.name)
        object.__setattr__(self, "path", SourcePath.parse(self.source_path))

    def to_dict(self) -> dict:
        return {"name": self.name, "source_path": self.source_path}


@dataclass(frozen=True)
class FinderDescriptor:
    """A generated type-level lookup operation.

    Attributes:
        name: Operation name (``find_by_<key>`` or ``find_all_by_<key>``).
        kind: ``single`` or ``collection``.
        key: Parameter name the lookup value is sent under.
        call: Remote method invoked by the finder.
        path: For collections, ElementTree path selecting one fragment per
            entity (``None`` uses the children of the response payload).
    """

    name: str
    kind: str
    key: str
    call: str
    path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind not in FINDER_KINDS:
            raise DeclarationError(
                f"Unknown finder kind {self.kind!r}, expected one of {FINDER_KINDS}"
            )
        if not self.call:
            raise DeclarationError(f"Finder {self.name!r} needs a remote call name")

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "kind": self.kind,
            "key": self.key,
            "call": self.call,
            "path": self.path,
        }


@dataclass(frozen=True)
class AssociationDescriptor:
    """A generated instance-level accessor for related entities.

    Attributes:
        name: Accessor name on the owning type.
        target: Registered name of the related entity type.
        finder: Collection finder invoked on the target type.
    """

    name: str
    target: str
    finder: str

    def to_dict(self) -> dict:
        return {"name": self.name, "target": self.target, "finder": self.finder}


@dataclass
class EntitySchema:
    """Declarative metadata of one entity type.

    Attributes:
        type_name: Name of the entity class.
        attributes: Attribute descriptors in declaration order.
        finders: Finder descriptors keyed by operation name.
        associations: Association descriptors keyed by accessor name.
        readers: Reader accessor generated for each attribute.
        operations: Dispatch table of generated finders and associations.
    """

    type_name: str
    attributes: List[AttributeDescriptor] = field(default_factory=list)
    finders: Dict[str, FinderDescriptor] = field(default_factory=dict)
    associations: Dict[str, AssociationDescriptor] = field(default_factory=dict)
    readers: Dict[str, Any] = field(default_factory=dict)
    operations: Dict[str, Callable[..., Any]] = field(default_factory=dict)
    _own_attributes: Set[str] = field(default_factory=set, repr=False)

    @classmethod
    def derive(cls, type_name: str, base: Optional["EntitySchema"]) -> "EntitySchema":
        """Create the schema of a new type, inheriting ``base`` declarations."""
        if base is None:
            return cls(type_name=type_name)
        return cls(
            type_name=type_name,
            attributes=list(base.attributes),
            finders=dict(base.finders),
            associations=dict(base.associations),
            readers=dict(base.readers),
            operations=dict(base.operations),
        )

    def check_attribute(self, name: str) -> None:
        """Raise if ``name`` was already declared by this type itself."""
        if name in self._own_attributes:
            raise DuplicateAttributeError(self.type_name, name)

    def add_attribute(self, descriptor: AttributeDescriptor, reader: Any = None) -> None:
        self.check_attribute(descriptor.name)
        self._own_attributes.add(descriptor.name)
        for index, existing in enumerate(self.attributes):
            if existing.name == descriptor.name:
                self.attributes[index] = descriptor
                break
        else:
            self.attributes.append(descriptor)
        if reader is not None:
            self.readers[descriptor.name] = reader

    def add_finder(
        self, descriptor: FinderDescriptor, operation: Callable[..., Any]
    ) -> None:
        self.finders[descriptor.name] = descriptor
        self.operations[descriptor.name] = operation

    def add_association(
        self, descriptor: AssociationDescriptor, operation: Callable[..., Any]
    ) -> None:
        self.associations[descriptor.name] = descriptor
        self.operations[descriptor.name] = operation

    def attribute_names(self) -> Tuple[str, ...]:
        return tuple(descriptor.name for descriptor in self.attributes)

    def get_attribute(self, name: str) -> Optional[AttributeDescriptor]:
        for descriptor in self.attributes:
            if descriptor.name == name:
                return descriptor
        return None

    def to_dict(self) -> dict:
        """Convert the schema into a JSON-serializable dictionary."""
        return {
            "type": self.type_name,
            "attributes": [a.to_dict() for a in self.attributes],
            "finders": [f.to_dict() for f in self.finders.values()],
            "associations": [a.to_dict() for a in self.associations.values()],
        }
