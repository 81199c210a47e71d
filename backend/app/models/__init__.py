"""SQLAlchemy declarative base for the application models."""
import uuid

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def generate_id() -> str:
    """Return a new opaque row identifier."""

    return str(uuid.uuid4())


# Import models so that Base.metadata knows every table.
# The imports are intentionally placed at the end of the module to avoid
# circular import issues when the individual model modules import ``Base``.
from .bird_nests import BirdNest  # noqa: F401,E402
from .categories import PostCategory  # noqa: F401,E402
from .orders import Order  # noqa: F401,E402
from .posts import Post  # noqa: F401,E402
from .products import Product  # noqa: F401,E402
from .users import User  # noqa: F401,E402


__all__ = [
    "Base",
    "BirdNest",
    "Order",
    "Post",
    "PostCategory",
    "Product",
    "User",
    "generate_id",
]
