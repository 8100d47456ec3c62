from rest_framework.permissions import BasePermission

from .exceptions import CompanyNotApproved


class IsAdminRole(BasePermission):
    """Allows access to users with the admin role or Django staff flag"""

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and (user.role == 'admin' or user.is_staff or user.is_superuser))


class IsApprovedCompany(BasePermission):
    """Allows access to users whose company profile has been approved"""

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        profile = getattr(user, 'company_profile', None)
        if profile is None or not profile.is_approved:
            raise CompanyNotApproved()
        return True
