"""
Identity model: a user's global role and normalized tenant membership.

A user with no organization and a user attached to the public marketplace
organization are the same thing (independent). Everything downstream works
with ``TenantRef`` so neither form needs special-casing again.
"""
import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantRef:
    organization_id: Optional[int] = None

    # False when the organization row is missing or deactivated.
    resolved: bool = True

    @property
    def is_independent(self) -> bool:
        return self.organization_id is None

    def matches(self, other: "TenantRef") -> bool:
        """
        True only for two references to the same real tenant.
        The marketplace is shared, not a tenant, so it never matches.
        A missing or deactivated organization matches nothing either.
        """
        if self.is_independent or other.is_independent:
            return False
        if not (self.resolved and other.resolved):
            return False
        return self.organization_id == other.organization_id

    def __str__(self):
        if self.is_independent:
            return "independent"
        return f"tenant({self.organization_id})"


INDEPENDENT = TenantRef()


@dataclass(frozen=True)
class Actor:
    """Immutable snapshot of the requesting user for one request."""

    id: int
    role: str
    tenant: TenantRef = INDEPENDENT

    @property
    def is_independent(self) -> bool:
        return self.tenant.is_independent


def tenant_from_id(organization_id, marketplace_id=None) -> TenantRef:
    if organization_id is None or organization_id == marketplace_id:
        return INDEPENDENT
    return TenantRef(organization_id)


def normalize_tenant(user, marketplace_id=None) -> TenantRef:
    return tenant_from_id(getattr(user, "organization_id", None), marketplace_id)


def is_independent(user, marketplace_id=None) -> bool:
    return normalize_tenant(user, marketplace_id).is_independent


# ============================
# DATABASE-BACKED HELPERS
# ============================

def current_marketplace_id():
    from organizations.models import Organization

    return Organization.objects.marketplace_id()


def tenant_for_user(user, marketplace_id=None) -> TenantRef:
    """
    Normalized tenant of a stored user, with the organization row checked.
    """
    from organizations.models import Organization

    if marketplace_id is None:
        marketplace_id = current_marketplace_id()

    tenant = normalize_tenant(user, marketplace_id)
    if tenant.is_independent:
        return tenant

    exists = Organization.objects.active().filter(pk=tenant.organization_id).exists()
    if not exists:
        logger.warning(
            "User %s points at missing or inactive organization %s",
            user.pk,
            tenant.organization_id,
        )
        return TenantRef(tenant.organization_id, resolved=False)

    return tenant


def build_actor(user, marketplace_id=None) -> Actor:
    return Actor(
        id=user.pk,
        role=user.role,
        tenant=tenant_for_user(user, marketplace_id),
    )
