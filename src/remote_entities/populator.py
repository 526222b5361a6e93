"""Populate entity attributes from XML documents.

Each attribute descriptor carries a :class:`~remote_entities.models.SourcePath`
which is resolved against an :mod:`xml.etree.ElementTree` document:

* ``name``        text content of the first element tagged ``name`` (the
  document's root node itself included)
* ``@nsid``       the ``nsid`` attribute of the document's root node
* ``photoset@id`` the ``id`` attribute of the first ``photoset`` element

Paths that resolve to nothing leave the attribute absent; they are not an
error. Values already present on the entity are never replaced, so a sequence
of partial documents (e.g. ``people.getInfo`` followed by a search result)
accumulates into one instance with first-write-wins semantics.

Example:
    from remote_entities.populator import parse_document, populate_from

    document = parse_document('<person nsid="1"><username>fleakr</username></person>')
    populate_from(person, document)
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING, Optional, Union

from .models import SourcePath

if TYPE_CHECKING:  # pragma: no cover - for type checkers only
    from .entity import SupportsEntity

logger = logging.getLogger(__name__)

Document = Union[ET.Element, ET.ElementTree]


def parse_document(source: Union[str, bytes]) -> ET.Element:
    """Parse XML text into a document element.

    Raises:
        xml.etree.ElementTree.ParseError: If ``source`` is not well-formed.
    """
    return ET.fromstring(source)


def root_of(document: Document) -> ET.Element:
    if isinstance(document, ET.ElementTree):
        return document.getroot()
    return document


def find_first(document: Document, tag: str) -> Optional[ET.Element]:
    """First element tagged ``tag`` in document order, root included."""
    return next(root_of(document).iter(tag), None)


def text_of(node: ET.Element) -> str:
    return "".join(node.itertext())


def resolve(document: Document, path: SourcePath) -> Optional[str]:
    """Resolve ``path`` against ``document``; ``None`` when nothing matches."""
    if path.tag is None:
        node: Optional[ET.Element] = root_of(document)
    else:
        node = find_first(document, path.tag)
    if node is None:
        return None
    if path.attribute is None:
        return text_of(node)
    return node.get(path.attribute)


def populate_from(entity: "SupportsEntity", document: Document) -> "SupportsEntity":
    """Merge values found in ``document`` into ``entity``.

    Args:
        entity: Entity instance whose type declares the attributes to extract.
        document: Parsed XML element (or element tree).

    Returns:
        The same ``entity``, to allow chaining.
    """
    values = entity.attribute_values
    for descriptor in type(entity).attributes():
        if values.get(descriptor.name) is not None:
            continue
        value = resolve(document, descriptor.path)
        if value is not None:
            values[descriptor.name] = value
    entity.document = document
    logger.debug(
        f"Populated {type(entity).__name__} from <{root_of(document).tag}>: "
        f"{sorted(values)}"
    )
    return entity
