from tokenauth.models.enums import OAuthProviderType, Role
from tokenauth.models.oauth_provider import OAuthProvider
from tokenauth.models.user import User

__all__ = [
    "OAuthProvider",
    "OAuthProviderType",
    "Role",
    "User",
]
