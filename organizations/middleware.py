import logging

from accounts.services.identity import build_actor

logger = logging.getLogger(__name__)


class ActiveTenantMiddleware:
    """
    Attaches ``request.actor``: the normalized identity of the logged in
    user (role and tenant), or None for anonymous requests.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.actor = None

        if request.user.is_authenticated:
            request.actor = build_actor(request.user)

            if not request.actor.tenant.resolved:
                logger.warning(
                    "User %s has an unresolved organization %s",
                    request.user.pk,
                    request.actor.tenant.organization_id,
                )

        return self.get_response(request)
