"""Exception hierarchy for the entity mapping layer.

Errors fall into three groups:

* declaration errors, raised while an entity class body is evaluated (or when
  a declaration is added afterwards) and therefore before any instance exists;
* configuration errors, raised when a finder or association is used without a
  usable remote client or an association target cannot be resolved;
* remote call errors, reported by the remote API itself.

Document resolution never raises: an unresolved attribute path simply leaves
the attribute absent.
"""

from __future__ import annotations

from typing import Optional


class RemoteEntitiesError(Exception):
    """Base class for every error raised by :mod:`remote_entities`."""


class DeclarationError(RemoteEntitiesError):
    """An entity type declaration is malformed."""


class DuplicateAttributeError(DeclarationError):
    """An attribute name was declared twice on the same entity type."""

    def __init__(self, type_name: str, attribute_name: str) -> None:
        self.type_name = type_name
        self.attribute_name = attribute_name
        super().__init__(
            f"Attribute {attribute_name!r} is already declared on {type_name}"
        )


class ConfigurationError(RemoteEntitiesError):
    """The layer is used before it has what it needs to reach the remote API."""


class UnknownEntityError(ConfigurationError):
    """No entity type is registered under the requested name."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"No entity type registered as {type_name!r}")


class RemoteCallError(RemoteEntitiesError):
    """The remote API reported a failure for a method call.

    Attributes:
        code: Error code reported by the API (``None`` when unavailable).
        message: Error message reported by the API.
        method: Remote method that failed.
    """

    def __init__(
        self, message: str, code: Optional[str] = None, method: Optional[str] = None
    ) -> None:
        self.code = code
        self.message = message
        self.method = method
        prefix = f"{method}: " if method else ""
        suffix = f" (code {code})" if code is not None else ""
        super().__init__(f"{prefix}{message}{suffix}")
