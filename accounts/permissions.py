from rest_framework.permissions import BasePermission

from .models import Account


def has_role(user, role: str) -> bool:
    """Return True if the authenticated ``user`` carries ``role`` on their account."""

    if not user or not user.is_authenticated:
        return False
    account = getattr(user, "account", None)
    return account is not None and account.role == role


class IsStudent(BasePermission):
    message = "Действие доступно только студентам."

    def has_permission(self, request, view):
        return has_role(request.user, Account.Role.STUDENT)


class IsLecturer(BasePermission):
    message = "Действие доступно только преподавателям."

    def has_permission(self, request, view):
        return has_role(request.user, Account.Role.LECTURER)
