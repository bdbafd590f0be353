# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Service layer: cached lookups and claim lifecycle operations."""

from .adjuster_service import AdjusterService, first_available
from .cache_keys import CacheKeys, CacheKind
from .claim_service import ClaimService
from .customer_service import CustomerService
from .lookup_cache import LookupCache
from .notification_service import NotificationService
from .performance_monitor import performance_monitor
from .policy_service import PolicyService

__all__ = [
    "AdjusterService",
    "first_available",
    "CacheKeys",
    "CacheKind",
    "ClaimService",
    "CustomerService",
    "LookupCache",
    "NotificationService",
    "PolicyService",
    "performance_monitor",
]
