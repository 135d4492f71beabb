"""ORM models aggregate exports."""
from .books import (  # noqa: F401
	Base,
	Book,
	User,
)

__all__ = [
	"Base",
	"Book",
	"User",
]
