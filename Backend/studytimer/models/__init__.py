from studytimer.models.base import Base
from studytimer.models.stored_value import StoredValue

__all__ = [
    "Base",
    "StoredValue",
]
