# accounts/backends.py
from django.contrib.auth.backends import ModelBackend
from django.contrib.auth import get_user_model
from django.db.models import Q

User = get_user_model()


class EmailBackend(ModelBackend):
    """
    Authentication backend that accepts either an email or a username
    """
    def authenticate(self, request, username=None, password=None, **kwargs):
        if username is None:
            username = kwargs.get(User.USERNAME_FIELD)
        if username is None or password is None:
            return None

        try:
            user = User.objects.get(Q(email__iexact=username) | Q(username=username))
        except User.DoesNotExist:
            # Run the default password hasher once to reduce timing attack
            User().set_password(password)
            return None
        except User.MultipleObjectsReturned:
            # One account's username equals another account's email: username wins
            user = User.objects.filter(username=username).first()

        if user and user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
