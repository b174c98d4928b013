"""Encrypted key/value record model."""
from sqlalchemy import LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column

from autoexpense.models.base import TimestampedModel


class SecureRecord(TimestampedModel):
    """One encrypted JSON blob per logical key.

    Collections (categories, transactions, ...) are stored whole under a
    single key; the value is a Fernet token of the JSON document.
    """

    __tablename__ = "secure_records"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    ciphertext: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    def __repr__(self) -> str:
        return f"<SecureRecord(key={self.key}, bytes={len(self.ciphertext or b'')})>"
