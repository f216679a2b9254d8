from app.services.auth_dependencies import require_user_auth

__all__ = [
    "require_user_auth",
]
