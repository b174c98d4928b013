"""Storage mode and configuration schemas."""

from enum import Enum

from pydantic import BaseModel, Field


class StorageMode(str, Enum):
    """Where collections live.

    The values are the persisted identifiers and must not change.
    """

    LOCAL = "offline"
    REMOTE_NEW = "auto"
    REMOTE_EXISTING = "existing"

    @property
    def is_remote(self) -> bool:
        return self is not StorageMode.LOCAL


class StorageConfig(BaseModel):
    mode: StorageMode = StorageMode.LOCAL
    spreadsheet_id: str | None = None


class SelectSheetRequest(BaseModel):
    spreadsheet_id: str = Field(..., min_length=1)


class StorageStatus(BaseModel):
    mode: StorageMode
    spreadsheet_id: str | None = None
    spreadsheet_url: str | None = None
