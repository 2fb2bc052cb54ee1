"""
Authentication and authorization
"""
from clubscore.auth.utils import get_current_user, create_access_token, verify_token

__all__ = [
    "get_current_user",
    "create_access_token",
    "verify_token",
]
