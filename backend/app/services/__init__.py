"""Domain services operating on a SQLAlchemy session."""
from . import bird_nests, categories

__all__ = ["bird_nests", "categories"]
