"""Tests for the Entity base class and its declarations."""

from unittest.mock import Mock, patch
import xml.etree.ElementTree as ET

import pytest

from remote_entities import (
    Attribute,
    DeclarationError,
    DuplicateAttributeError,
    Entity,
    SupportsEntity,
    UnknownEntityError,
    get_entity_type,
    parse_document,
)
from remote_entities.cache import ResultCache

from sample_entities import AssociatedObject, EmptyObject, FlickrObject


def test_empty_entity_has_no_attributes():
    """Test that a type without declarations lists no attributes."""
    assert EmptyObject.attributes() == ()


def test_attributes_are_listed_in_declaration_order():
    """Test attribute order, including late declarations."""
    names = [a.name for a in FlickrObject.attributes()]
    assert names == ["name", "description", "id", "photoset_id", "tag", "category"]


def test_attribute_source_paths():
    """Test default and explicit source paths."""
    paths = {a.name: a.source_path for a in FlickrObject.attributes()}
    assert paths["name"] == "name"
    assert paths["description"] == "desc"
    assert paths["id"] == "@nsid"
    assert paths["photoset_id"] == "photoset@id"


def test_declared_attributes_have_readers():
    """Test that every attribute has a reader returning None until populated."""
    obj = FlickrObject()
    for name in ["name", "description", "id", "photoset_id", "tag", "category"]:
        assert hasattr(obj, name)
        assert getattr(obj, name) is None


def test_readers_are_read_only():
    """Test that readers cannot be assigned."""
    obj = FlickrObject(parse_document("<name>Fleakr</name>"))
    with pytest.raises(AttributeError):
        obj.name = "Other"
    assert obj.name == "Fleakr"


def test_captures_auth_token_from_options():
    """Test that only credential options are retained."""
    obj = EmptyObject(None, {"foo": "bar", "auth_token": "toke"})
    assert obj.authentication_options == {"auth_token": "toke"}


def test_authentication_options_default_to_empty():
    """Test construction without credentials."""
    assert EmptyObject().authentication_options == {}
    assert EmptyObject(None, {"per_page": "10"}).authentication_options == {}


def test_populates_from_document_when_initializing():
    """Test that a constructor document is populated."""
    document = ET.Element("empty")
    with patch.object(FlickrObject, "populate_from") as populate:
        FlickrObject(document)
    populate.assert_called_once_with(document)


def test_does_not_populate_without_document():
    """Test that no population happens without a document."""
    with patch.object(FlickrObject, "populate_from") as populate:
        FlickrObject()
    populate.assert_not_called()


def test_has_a_cache():
    """Test lazy cache creation."""
    obj = FlickrObject()
    with patch("remote_entities.entity.ResultCache", return_value="cache"):
        assert obj.cache == "cache"


def test_cache_is_created_once():
    """Test that the cache is reused."""
    obj = FlickrObject()
    cache = obj.cache
    assert isinstance(cache, ResultCache)
    assert obj.cache is cache


def test_caches_the_result_of_a_method_call():
    """Test with_caching runs the producer once."""
    user = Mock()
    user.id.return_value = "1"
    obj = FlickrObject()

    assert obj.with_caching({}, "user_id", lambda: user.id()) == "1"
    assert obj.with_caching({}, "user_id", lambda: user.id()) == "1"
    user.id.assert_called_once_with()


def test_caching_distinguishes_parameters_and_operations():
    """Test that cache entries are keyed by operation and parameters."""
    producer = Mock(side_effect=["a", "b", "c"])
    obj = FlickrObject()

    assert obj.with_caching({"page": 1}, "photos", producer) == "a"
    assert obj.with_caching({"page": 2}, "photos", producer) == "b"
    assert obj.with_caching({"page": 1}, "sets", producer) == "c"
    assert obj.with_caching({"page": 1}, "photos", producer) == "a"
    assert producer.call_count == 3


def test_caches_are_per_instance():
    """Test that instances do not share cached results."""
    producer = Mock(return_value="value")
    FlickrObject().with_caching({}, "key", producer)
    FlickrObject().with_caching({}, "key", producer)
    assert producer.call_count == 2


def test_associated_object_keeps_owner_credentials():
    """Test passing credentials on to related objects."""
    obj = FlickrObject(None, {"auth_token": "toke"})
    [other] = obj.other_things()

    assert other.authentication_options == {"auth_token": "toke"}
    assert obj.authentication_options == {"auth_token": "toke"}
    assert other.authentication_options is not obj.authentication_options


def test_to_dict_lists_every_declared_attribute():
    """Test dictionary export of attribute values."""
    obj = AssociatedObject(parse_document('<object id="3"><name>Thing</name></object>'))
    assert obj.to_dict() == {"id": "3", "name": "Thing"}


def test_entities_support_the_entity_protocol():
    """Test the runtime-checkable entity protocol."""
    assert isinstance(FlickrObject(), SupportsEntity)
    assert not isinstance(object(), SupportsEntity)


class TestDeclarations:
    """Declaration-time validation of entity types."""

    def test_duplicate_attribute_in_class_body_is_rejected(self):
        """Test duplicate attribute names in one class body."""
        with pytest.raises(DuplicateAttributeError) as excinfo:

            class TwiceDeclared(Entity):
                tag = Attribute()
                tag = Attribute("label")

        assert excinfo.value.attribute_name == "tag"

    def test_duplicate_declare_attribute_is_rejected(self):
        """Test duplicate attribute names added after definition."""
        with pytest.raises(DuplicateAttributeError):
            FlickrObject.declare_attribute("tag")
        assert [a.name for a in FlickrObject.attributes()].count("tag") == 1

    def test_declare_attribute_after_definition(self):
        """Test adding an attribute to an existing type."""
        class LateDeclared(Entity):
            title = Attribute()

        LateDeclared.declare_attribute("owner_id", "owner@nsid")

        obj = LateDeclared(parse_document('<photo><title>Hi</title><owner nsid="9"/></photo>'))
        assert [a.name for a in LateDeclared.attributes()] == ["title", "owner_id"]
        assert obj.owner_id == "9"

    def test_reserved_names_are_rejected(self):
        """Test that Entity member names cannot become attributes."""
        class ClashingEntity(Entity):
            pass

        with pytest.raises(DeclarationError):
            ClashingEntity.declare_attribute("document")
        assert ClashingEntity.attributes() == ()

    def test_invalid_source_path_is_rejected(self):
        """Test that a malformed source path is rejected."""
        class BadPathEntity(Entity):
            pass

        with pytest.raises(DeclarationError):
            BadPathEntity.declare_attribute("secret", "owner@")

    def test_rejected_declaration_leaves_the_type_unchanged(self):
        """Test that a failed declaration binds nothing on the type."""
        class HalfDeclared(Entity):
            title = Attribute()

        with pytest.raises(DeclarationError):
            HalfDeclared.declare_attribute("secret", "owner@")

        assert "secret" not in vars(HalfDeclared)
        assert [a.name for a in HalfDeclared.attributes()] == ["title"]
        HalfDeclared.declare_attribute("secret", "owner@nsid")
        assert HalfDeclared.attributes()[-1].source_path == "owner@nsid"

    def test_rejected_redeclaration_restores_the_previous_value(self):
        """Test that a failed reassignment keeps the earlier declaration."""
        class Overridden(Entity):
            title = Attribute()

        original = vars(Overridden)["title"]
        with pytest.raises(DeclarationError):
            Overridden.title = Attribute("@")

        assert vars(Overridden)["title"] is original
        assert Overridden.attributes()[0].source_path == "title"

    def test_reserved_name_in_class_body_is_rejected(self):
        """Test a reserved name declared in the class body."""
        with pytest.raises(DeclarationError, match="clashes with an Entity member"):

            class ShadowsDocument(Entity):
                document = Attribute()

    def test_invalid_source_path_in_class_body_is_rejected(self):
        """Test a malformed source path declared in the class body."""
        with pytest.raises(DeclarationError):

            class BadPathInBody(Entity):
                secret = Attribute("owner@")

    def test_rejected_class_body_is_not_registered(self):
        """Test that a rejected type never reaches the registry."""
        with pytest.raises(DeclarationError):

            class NeverRegistered(Entity):
                populate_from = Attribute()

        with pytest.raises(UnknownEntityError):
            get_entity_type("NeverRegistered")

    def test_subclass_inherits_and_overrides_attributes(self):
        """Test attribute inheritance and in-place overrides."""
        class BaseRecord(Entity):
            name = Attribute()
            title = Attribute()

        class DerivedRecord(BaseRecord):
            name = Attribute("username")
            extra = Attribute()

        assert [a.name for a in BaseRecord.attributes()] == ["name", "title"]
        assert [a.name for a in DerivedRecord.attributes()] == ["name", "title", "extra"]
        assert DerivedRecord.attributes()[0].source_path == "username"
        assert BaseRecord.attributes()[0].source_path == "name"

    def test_unrelated_types_do_not_share_attributes(self):
        """Test that sibling types keep separate registries."""
        class FirstKind(Entity):
            alpha = Attribute()

        class SecondKind(Entity):
            beta = Attribute()

        assert [a.name for a in FirstKind.attributes()] == ["alpha"]
        assert [a.name for a in SecondKind.attributes()] == ["beta"]

    def test_schema_records_generated_operations(self):
        """Test the operations and readers recorded in the schema."""
        schema = FlickrObject.schema()
        assert set(schema.operations) == {"find_by_id", "associated_objects"}
        assert set(schema.readers) == set(schema.attribute_names())
