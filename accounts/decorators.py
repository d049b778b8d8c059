from functools import wraps

from rest_framework.exceptions import NotAuthenticated, PermissionDenied
from rest_framework.permissions import BasePermission
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer


def role_required(required_role):
    """
    Role-based decorator for DRF function views.
    Apply it below @api_view so ``request`` is a DRF request.
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            user = request.user

            if not user or not user.is_authenticated:
                raise NotAuthenticated("Authentication required")

            if user.user_type != required_role:
                raise PermissionDenied(f"Access denied. This endpoint is for {required_role}s only.")

            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator


class UserTypePermission(BasePermission):
    """Same check as role_required, for class-based views"""
    user_type = None
    message = "Access denied"

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.user_type == self.user_type)


class IsHospitalUser(UserTypePermission):
    user_type = 'hospital'
    message = "Access denied. This endpoint is for hospitals only."


class IsDonorUser(UserTypePermission):
    user_type = 'donor'
    message = "Access denied. This endpoint is for donors only."


# REST API Token serializer
class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['user_type'] = user.user_type
        token['username'] = user.username
        return token
