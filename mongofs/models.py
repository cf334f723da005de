from enum import Enum
from typing import Literal

from typing_extensions import NotRequired, TypedDict


class FileRecord(TypedDict):
    """The filesystem view of a stored object. Never persisted, always rebuilt from the store"""

    path: str
    type: Literal["file"]
    size: int | None
    timestamp: int | None
    dirname: str
    mimetype: NotRequired[str]  # only present if the object was stored with a non-empty mimetype


class DirRecord(TypedDict):
    path: str
    type: Literal["dir"]
    dirname: str


######################## COMPOUND OPERATION OUTCOMES #########################
# Deleting and renaming take several store round trips that are not atomic.
# These outcomes tell callers which step failed.


class DeleteOutcome(str, Enum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"
    LOOKUP_FAILED = "lookup_failed"
    DELETE_FAILED = "delete_failed"

    def __bool__(self) -> bool:
        return self is DeleteOutcome.DELETED


class RenameOutcome(str, Enum):
    RENAMED = "renamed"
    COPY_FAILED = "copy_failed"
    # the copy exists at the new path, but the original could not be removed
    DELETE_FAILED = "delete_failed"

    def __bool__(self) -> bool:
        return self is RenameOutcome.RENAMED
