# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Base Pydantic model configuration for all domain models.

Two bases are provided:

- ``BaseModelConfig`` for models owned by the workers (task requests),
  strict and immutable.
- ``ApiModel`` for payloads exchanged with the remote insurance services.
  Those services speak camelCase JSON and may add fields at any time, so
  unknown fields are ignored instead of rejected.
"""

from typing import Any

from beartype import beartype
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


@beartype
class BaseModelConfig(BaseModel):
    """Base model with strict configuration for worker-owned entities.

    Enforces:
    - Immutability (frozen=True)
    - No extra fields allowed (extra="forbid")
    - Validation on assignment
    - Automatic whitespace stripping
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
        validate_default=True,
    )


@beartype
class ApiModel(BaseModel):
    """Base model for remote service payloads (camelCase on the wire)."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
    )

    def to_api(self) -> dict[str, Any]:
        """Serialize to the JSON body expected by the remote services."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
