"""Naming conventions linking associations, finders and entity types.

An association named ``associated_objects`` on ``FlickrObject`` targets the
``AssociatedObject`` type and calls its ``find_all_by_flickr_object_id``
finder. Only the regular English plural forms that show up in remote API
method and element names are handled; anything else should name its target
explicitly.
"""

from __future__ import annotations

import re

_IRREGULAR = {
    "people": "person",
    "children": "child",
    "men": "man",
    "women": "woman",
}

_SINGULAR_RULES = [
    (re.compile(r"(quiz)zes$"), r"\1"),
    (re.compile(r"([^aeiouy])ies$"), r"\1y"),
    (re.compile(r"(alias|status|bus|campus|census|virus)es$"), r"\1"),
    (re.compile(r"(x|ch|sh|ss|zz)es$"), r"\1"),
    (re.compile(r"([^s])s$"), r"\1"),
]


def underscore(name: str) -> str:
    """``FlickrObject`` -> ``flickr_object``."""
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", name)
    return name.replace("-", "_").lower()


def camelize(name: str) -> str:
    """``associated_object`` -> ``AssociatedObject``."""
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


def singularize(word: str) -> str:
    """Singular form of the last word of an underscored name."""
    head, sep, last = word.rpartition("_")
    lowered = last.lower()
    if lowered in _IRREGULAR:
        return f"{head}{sep}{_IRREGULAR[lowered]}"
    for pattern, replacement in _SINGULAR_RULES:
        if pattern.search(last):
            return f"{head}{sep}{pattern.sub(replacement, last)}"
    return word


def classify(name: str) -> str:
    """Entity type name for an association name."""
    return camelize(singularize(name))


def foreign_key(type_name: str) -> str:
    """Lookup key naming an owner of type ``type_name``."""
    return f"{underscore(type_name)}_id"
