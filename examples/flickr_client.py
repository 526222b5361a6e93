#!/usr/bin/env python3
"""
Example entity declarations for the Flickr REST API.

This script demonstrates how to declare entity types with attributes,
finders and associations, and how to use them against a live endpoint.

Usage:
    REMOTE_ENTITIES_API_KEY=... python examples/flickr_client.py fleakr
"""

import logging
import sys

from remote_entities import Attribute, Entity, find_all, find_one, has_many
from remote_entities.errors import RemoteEntitiesError


class User(Entity):
    """A Flickr member."""

    id = Attribute("user@nsid")
    username = Attribute()
    name = Attribute("realname")
    location = Attribute()
    photos_url = Attribute("photosurl")
    icon_server = Attribute("person@iconserver")

    find_by_username = find_one(call="people.findByUsername")
    find_by_email = find_one(call="people.findByEmail", key="find_email")

    photosets = has_many()
    photos = has_many()
    contacts = has_many()


class Photoset(Entity):
    """An album of photos belonging to a user."""

    id = Attribute("@id")
    title = Attribute()
    description = Attribute()
    count = Attribute("@photos")
    primary_photo_id = Attribute("@primary")

    find_all_by_user_id = find_all(call="photosets.getList", path="photosets/photoset")


class Photo(Entity):
    """A single photo."""

    id = Attribute("@id")
    title = Attribute("@title")
    server_id = Attribute("@server")
    secret = Attribute("@secret")

    find_all_by_user_id = find_all(call="people.getPublicPhotos", path="photos/photo")


class Contact(Entity):
    """Another member in a user's contact list."""

    id = Attribute("@nsid")
    username = Attribute("@username")

    find_all_by_user_id = find_all(call="contacts.getPublicList", path="contacts/contact")


def main(username: str) -> int:
    """Print a user's photosets and most recent public photos."""
    logging.basicConfig(level=logging.INFO)

    try:
        user = User.find_by_username(username)
        print(f"{user.username} ({user.id})")

        for photoset in user.photosets():
            print(f"  [set] {photoset.title} - {photoset.count} photos")

        for photo in user.photos({"per_page": "5"}):
            print(f"  [photo] {photo.title}")

        # Served from the user's result cache, no second remote call
        user.photos({"per_page": "5"})
    except RemoteEntitiesError as e:
        print(f"Lookup failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else "fleakr"))
