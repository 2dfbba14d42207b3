"""
Tenant scoping: caller identity, scope resolution and scoping strategies.

Usage:
    from rest_api.services.permissions import CallerIdentity, ScopeResolver, ProjectScope

    scope = ScopeResolver(db).resolve(CallerIdentity.from_claims(user))
    request = ProjectScope().apply(request, scope)
"""

from .context import CallerIdentity
from .scope import ScopeContext, ScopeResolver
from .strategies import (
    ScopingStrategy,
    GlobalScope,
    ProjectScope,
    OwnerOrProjectScope,
    SuperAdminOnlyScope,
)

__all__ = [
    "CallerIdentity",
    "ScopeContext",
    "ScopeResolver",
    "ScopingStrategy",
    "GlobalScope",
    "ProjectScope",
    "OwnerOrProjectScope",
    "SuperAdminOnlyScope",
]
