"""Centralized cache key management for consistency and type safety.

This module provides a single source of truth for cache key patterns
across all services, ensuring consistency and preventing key collisions.
"""

from enum import Enum

from beartype import beartype

from ..models.claim import ClaimType


class CacheKind(str, Enum):
    """Entity families held in the lookup cache."""

    AUTO_CLAIM = "claim:auto"
    HOME_CLAIM = "claim:home"
    HEALTH_CLAIM = "claim:health"
    CUSTOMER = "customer"
    POLICY = "policy:number"
    POLICY_VALIDITY = "policy:valid"

    @classmethod
    @beartype
    def for_claim(cls, claim_type: ClaimType) -> "CacheKind":
        """Cache family of a claim type; claim ids are only unique per type."""
        return cls(f"claim:{claim_type.path}")


class CacheKeys:
    """Centralized cache key management."""

    @staticmethod
    @beartype
    def entity(kind: CacheKind, entity_id: int | str) -> str:
        """Cache key for one entity of ``kind``."""
        return f"{kind.value}:{entity_id}"

