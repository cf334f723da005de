"""
The generic filesystem contract implemented by storage adapters.

All paths are relative to the root of the adapter, with "/" as separator.
Lookups of missing paths return False rather than raising,
operations an adapter cannot support raise UnsupportedOperation.
"""

from abc import ABC, abstractmethod
from io import BytesIO
from typing import Any, BinaryIO, Literal

from pydantic import BaseModel, ConfigDict

from mongofs.filesystem.util import normalize_path

Visibility = Literal["public", "private"]


class UnsupportedOperation(Exception):
    """The adapter (or the store behind it) does not offer this operation at all"""

    pass


class WriteConfig(BaseModel):
    """Options for write and update calls. Unknown options are accepted and ignored by adapters"""

    model_config = ConfigDict(extra="allow")

    mimetype: str | None = None

    def has(self, key: str) -> bool:
        return key in self.model_fields_set or key in (self.model_extra or {})

    def get(self, key: str, default: Any = None) -> Any:
        if not self.has(key):
            return default
        return getattr(self, key)


class FilesystemAdapter(ABC):
    path_prefix: str | None = None

    def set_path_prefix(self, prefix: str | None):
        self.path_prefix = normalize_path(prefix) if prefix else None

    def get_path_prefix(self) -> str | None:
        return self.path_prefix

    def apply_path_prefix(self, path: str) -> str:
        path = normalize_path(path)
        if not self.path_prefix:
            return path
        return f"{self.path_prefix}/{path}" if path else self.path_prefix

    def remove_path_prefix(self, path: str) -> str:
        if self.path_prefix and path.startswith(f"{self.path_prefix}/"):
            return path[len(self.path_prefix) + 1 :]
        return path

    @abstractmethod
    def has(self, path: str) -> bool: ...

    @abstractmethod
    def read(self, path: str) -> dict | Literal[False]: ...

    @abstractmethod
    def read_stream(self, path: str) -> dict | Literal[False]: ...

    @abstractmethod
    def write(self, path: str, contents: bytes | str, config: WriteConfig) -> dict | Literal[False]: ...

    @abstractmethod
    def write_stream(self, path: str, stream: BinaryIO, config: WriteConfig) -> dict | Literal[False]: ...

    @abstractmethod
    def update(self, path: str, contents: bytes | str, config: WriteConfig) -> dict | Literal[False]: ...

    @abstractmethod
    def update_stream(self, path: str, stream: BinaryIO, config: WriteConfig) -> dict | Literal[False]: ...

    @abstractmethod
    def delete(self, path: str) -> bool: ...

    @abstractmethod
    def delete_dir(self, path: str) -> bool: ...

    @abstractmethod
    def rename(self, path: str, newpath: str) -> bool: ...

    @abstractmethod
    def copy(self, path: str, newpath: str) -> bool: ...

    @abstractmethod
    def list_contents(self, dirname: str = "", recursive: bool = False) -> list[dict] | Literal[False]: ...

    @abstractmethod
    def get_metadata(self, path: str) -> dict | Literal[False]: ...

    @abstractmethod
    def get_mimetype(self, path: str) -> dict | Literal[False]: ...

    @abstractmethod
    def get_size(self, path: str) -> dict | Literal[False]: ...

    @abstractmethod
    def get_timestamp(self, path: str) -> dict | Literal[False]: ...

    @abstractmethod
    def create_dir(self, path: str, config: WriteConfig) -> dict | Literal[False]: ...

    @abstractmethod
    def set_visibility(self, path: str, visibility: Visibility) -> dict | Literal[False]: ...

    @abstractmethod
    def get_visibility(self, path: str) -> dict | Literal[False]: ...


class NotSupportingVisibility:
    def set_visibility(self, path: str, visibility: Visibility):
        raise UnsupportedOperation(f"{type(self).__name__} does not support visibility. Path: {path}")

    def get_visibility(self, path: str):
        raise UnsupportedOperation(f"{type(self).__name__} does not support visibility. Path: {path}")


class StreamedReading:
    """Provide read_stream on top of a (non-streaming) read"""

    def read_stream(self, path: str) -> dict | Literal[False]:
        data = self.read(path)  # type: ignore[attr-defined]
        if data is False:
            return False
        return dict(stream=BytesIO(data["contents"]))


class StreamedCopy:
    """Copy a file by streaming it out of and back into the same adapter"""

    def copy(self, path: str, newpath: str) -> bool:
        response = self.read_stream(path)  # type: ignore[attr-defined]
        if response is False:
            return False
        result = self.write_stream(newpath, response["stream"], WriteConfig())  # type: ignore[attr-defined]
        return result is not False
