"""Authentication helpers."""

from .guards import require_admin, require_user

__all__ = ["require_admin", "require_user"]
