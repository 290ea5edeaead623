from django.core.exceptions import PermissionDenied


class AccessDenied(PermissionDenied):
    """
    Raised by services when the permission evaluator says no.
    Carries the decision so the API layer can report its reason.
    """

    def __init__(self, decision):
        self.decision = decision
        super().__init__(decision.message)


class OrganizationNotFound(Exception):
    """The actor's organization row is missing or deactivated."""

    def __init__(self, organization_id=None):
        self.organization_id = organization_id
        super().__init__("Your organization could not be found.")
