"""Remote Entities
==================

Declarative mapping of remote XML API responses onto Python objects.

An entity type lists the fields it reads from XML documents, the remote
methods that fetch it and the related collections it exposes; the library
generates readers, finders and association accessors from those declarations
and memoizes repeatable remote lookups per instance.

Key capabilities
----------------
- Attribute declarations resolved against :mod:`xml.etree.ElementTree`
  documents (``tag``, ``@attr`` and ``tag@attr`` paths) with first-write-wins
  merging of partial documents.
- Generated ``find_by_<key>`` / ``find_all_by_<key>`` finders calling a
  pluggable remote client (``httpx`` based :class:`RestClient` by default).
- ``has_many`` associations resolved by naming convention, carrying the
  owner's authentication options.
- Per-instance result caching via :meth:`Entity.with_caching`.

Minimal quick start
-------------------
>>> from remote_entities import Attribute, Entity, RestClient, configure, find_one
>>> class User(Entity):
...     id = Attribute("person@nsid")
...     username = Attribute()
...     find_by_username = find_one(call="people.findByUsername")
>>> configure(RestClient(api_key="..."))  # doctest: +SKIP
>>> User.find_by_username("fleakr").id  # doctest: +SKIP

Public surface
--------------
Only the declaration API and client configuration are exported at the package
level; the component modules can be imported explicitly.
"""

__version__ = "0.1.0"

from .associations import has_many
from .cache import ResultCache
from .client import RestClient, Response, configure, get_client, reset_client
from .entity import Attribute, Entity, SupportsEntity
from .errors import (
    ConfigurationError,
    DeclarationError,
    DuplicateAttributeError,
    RemoteCallError,
    RemoteEntitiesError,
    UnknownEntityError,
)
from .finders import find_all, find_one
from .populator import parse_document
from .registry import attributes_of, get_entity_type

__all__ = [
    "Attribute",
    "ConfigurationError",
    "DeclarationError",
    "DuplicateAttributeError",
    "Entity",
    "RemoteCallError",
    "RemoteEntitiesError",
    "Response",
    "RestClient",
    "ResultCache",
    "SupportsEntity",
    "UnknownEntityError",
    "attributes_of",
    "configure",
    "find_all",
    "find_one",
    "get_client",
    "get_entity_type",
    "has_many",
    "parse_document",
    "reset_client",
]
