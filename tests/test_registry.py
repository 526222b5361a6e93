"""Tests for the process-wide entity type registry."""

import logging

import pytest

from remote_entities import Attribute, Entity, UnknownEntityError, attributes_of, get_entity_type
from remote_entities.registry import (
    entity_types_in,
    register_entity_type,
    registered_entity_types,
    unregister_entity_type,
)

from sample_entities import AssociatedObject, EmptyObject, FlickrObject


def test_declared_types_are_registered():
    """Test registration at class creation."""
    assert get_entity_type("FlickrObject") is FlickrObject
    assert get_entity_type("AssociatedObject") is AssociatedObject
    assert "EmptyObject" in registered_entity_types()


def test_base_class_is_not_registered():
    """Test that abstract types are skipped."""
    assert "Entity" not in registered_entity_types()


def test_unknown_type():
    """Test lookup of an unregistered name."""
    with pytest.raises(UnknownEntityError) as excinfo:
        get_entity_type("NoSuchThing")
    assert excinfo.value.type_name == "NoSuchThing"


def test_attributes_of():
    """Test attributes_of on entities and other types."""
    assert attributes_of(EmptyObject) == ()
    assert [a.name for a in attributes_of("FlickrObject")] == [
        "name",
        "description",
        "id",
        "photoset_id",
        "tag",
        "category",
    ]
    assert attributes_of(object) == ()


def test_entity_types_in_module():
    """Test listing the types declared in a module."""
    assert entity_types_in("sample_entities") == [EmptyObject, FlickrObject, AssociatedObject]


def test_reregistering_a_name_replaces_it(caplog):
    """Test that a reused name replaces the type and warns."""
    class Transient(Entity):
        title = Attribute()

    first = Transient

    with caplog.at_level(logging.WARNING, logger="remote_entities.registry"):

        class Transient(Entity):  # noqa: F811
            name = Attribute()

    assert get_entity_type("Transient") is Transient
    assert get_entity_type("Transient") is not first
    assert "replaces" in caplog.text

    unregister_entity_type("Transient")
    with pytest.raises(UnknownEntityError):
        get_entity_type("Transient")

    register_entity_type(first)
    assert get_entity_type("Transient") is first
    unregister_entity_type("Transient")
