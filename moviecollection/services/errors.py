"""Typed failures raised by the catalog core."""

from __future__ import annotations


class CatalogError(Exception):
    """Base exception for catalog failures."""


class NotFound(CatalogError):
    """Raised when a lookup, update or delete target does not exist."""

    def __init__(self, entity: str, entity_id: int) -> None:
        super().__init__(f"{entity} not found with id: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class UnknownActor(CatalogError):
    """Raised when a cast attach references an id with no backing actor."""

    def __init__(self, actor_id: int) -> None:
        super().__init__(f"Unknown actor id: {actor_id}")
        self.actor_id = actor_id


class MalformedIdentifier(CatalogError):
    """Raised when identifier text cannot be parsed as a key."""

    def __init__(self, text: str) -> None:
        super().__init__(f"Malformed identifier: {text!r}")
        self.text = text


class InvalidRegistration(CatalogError):
    """Raised when a registration is missing its username or password."""


class Conflict(CatalogError):
    """Raised by a store when a unique value is already taken."""


class StoreFailure(CatalogError):
    """Opaque failure from the persistence layer."""
