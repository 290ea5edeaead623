from functools import wraps

from core.exceptions import AccessDenied, OrganizationNotFound
from core.http import request_actor
from organizations.permissions import DenyReason, deny
from accounts.models.user import GlobalRole


def tenant_role_required(*roles):
    """
    Restricts a view to the given global roles. super_admin always passes.
    Other roles additionally need a tenant that still exists.
    """

    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):

            # 1. Must be logged in
            actor = request_actor(request)
            if actor is None:
                raise AccessDenied(deny(DenyReason.UNAUTHENTICATED))

            # 2. God mode
            if actor.role == GlobalRole.SUPER_ADMIN:
                return view_func(request, *args, **kwargs)

            # 3. Role check
            if actor.role not in roles:
                raise AccessDenied(deny(DenyReason.INSUFFICIENT_ROLE))

            # 4. Tenant must still be there
            if not actor.tenant.resolved:
                raise OrganizationNotFound(actor.tenant.organization_id)

            return view_func(request, *args, **kwargs)

        return _wrapped

    return decorator
