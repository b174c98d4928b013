"""Database models."""
from autoexpense.models.base import Base
from autoexpense.models.record import SecureRecord

__all__ = ["Base", "SecureRecord"]
