"""
permissions.py
--------------
Transport-layer authorization. Views resolve the acting Member from
request.user.member; the service layer trusts the organization and branch it
is handed and does no role checks of its own.
"""

from rest_framework.permissions import BasePermission, SAFE_METHODS

from .models import Member


def acting_member(request):
    user = getattr(request, "user", None)
    if not user or not user.is_authenticated:
        return None
    return getattr(user, "member", None)


class IsOrganizationMember(BasePermission):
    """Any logged-in user linked to a Member row."""
    message = "Your account is not linked to an organization."

    def has_permission(self, request, view):
        return acting_member(request) is not None


class HasRole(BasePermission):
    """
    Role gate. Subclass with `roles = (...)`, or use HasRole.of(...).
    When `read_roles` is set, safe methods are checked against it instead.
    """
    roles = ()
    read_roles = None

    @classmethod
    def of(cls, *roles, read_roles=None):
        return type(
            "HasRole_" + "_".join(roles),
            (cls,),
            {"roles": roles, "read_roles": read_roles},
        )

    def has_permission(self, request, view):
        member = acting_member(request)
        if member is None:
            return False
        allowed = self.roles
        if self.read_roles is not None and request.method in SAFE_METHODS:
            allowed = self.read_roles
        return member.role in allowed


IsManagerOrAdmin = HasRole.of(Member.SUPER_ADMIN, Member.ADMIN, Member.MANAGER)

# Calendar writes: managers/admins. Calendar reads: also the artists themselves.
CalendarAccess = HasRole.of(
    Member.SUPER_ADMIN, Member.ADMIN, Member.MANAGER,
    read_roles=(Member.SUPER_ADMIN, Member.ADMIN, Member.MANAGER, Member.ARTIST),
)

# Front desk books and edits appointments; artists may read them.
FrontDesk = HasRole.of(
    Member.SUPER_ADMIN, Member.ADMIN, Member.MANAGER, Member.RECEPTIONIST,
    read_roles=(Member.SUPER_ADMIN, Member.ADMIN, Member.MANAGER, Member.RECEPTIONIST, Member.ARTIST),
)
