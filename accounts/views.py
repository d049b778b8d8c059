from rest_framework_simplejwt.views import TokenObtainPairView

from accounts.decorators import CustomTokenObtainPairSerializer


class LoginView(TokenObtainPairView):
    """
    JWT login. ``username`` may be the account's username or email
    (see accounts.backends.EmailBackend); the access token carries user_type.
    """
    serializer_class = CustomTokenObtainPairSerializer
