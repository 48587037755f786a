"""
Multipart form data encoding
Turns a loosely typed mapping into a multipart body of fields and file parts
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple, Union

from urllib3.filepost import encode_multipart_formdata

OCTET_STREAM = "application/octet-stream"


class FileSource(Protocol):
    """Reads upload content"""

    def read_all_bytes(self, path: Union[str, "os.PathLike[str]"]) -> bytes: ...


class LocalFileSource:
    """FileSource backed by the local file system"""

    def read_all_bytes(self, path: Union[str, "os.PathLike[str]"]) -> bytes:
        return Path(path).read_bytes()


@dataclass(frozen=True)
class FilePart:
    """A file attached to a multipart body"""
    filename: str
    content: bytes = field(repr=False)
    content_type: str = OCTET_STREAM

    def __len__(self) -> int:
        return len(self.content)


def _field_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


@dataclass(frozen=True)
class MultipartBody:
    """
    Encoded form: ordered scalar fields followed by ordered file parts

    Duplicate keys are allowed in both sequences.
    """
    fields: Tuple[Tuple[str, Any], ...] = ()
    files: Tuple[Tuple[str, FilePart], ...] = ()

    def encode(self, boundary: Optional[str] = None) -> Tuple[bytes, str]:
        """
        Render the wire body

        Returns:
            Tuple of (body bytes, content type including boundary)
        """
        parts: List[Tuple[str, Any]] = [
            (key, _field_text(value)) for key, value in self.fields
        ]
        parts.extend(
            (key, (part.filename, part.content, part.content_type))
            for key, part in self.files
        )
        return encode_multipart_formdata(parts, boundary=boundary)

    def field_values(self, key: str) -> List[Any]:
        return [value for name, value in self.fields if name == key]

    def file_parts(self, key: str) -> List[FilePart]:
        return [part for name, part in self.files if name == key]


class RetroFormData:
    """
    Form data to be sent as multipart/form-data

    Values that are paths (``pathlib.Path`` or any ``os.PathLike``) or
    prebuilt ``FilePart`` objects become file parts. Lists and tuples
    expand into repeated entries under the same key. Everything else is
    a scalar field.

    Example:
        >>> form = RetroFormData({"name": "avatar", "file": Path("me.png")})
        >>> body = form.encode()
    """

    def __init__(
        self,
        data: Optional[Mapping[str, Any]] = None,
        file_source: Optional[FileSource] = None,
    ) -> None:
        self._data: Dict[str, Any] = dict(data or {})
        self._file_source = file_source or LocalFileSource()

    @property
    def data(self) -> Dict[str, Any]:
        return dict(self._data)

    def encode(self) -> MultipartBody:
        """
        Build the multipart body

        File content is read eagerly; read errors propagate as OSError.
        """
        fields: List[Tuple[str, Any]] = []
        files: List[Tuple[str, FilePart]] = []

        for key, value in self._data.items():
            if self._is_file(value):
                files.append((key, self._file_part(value)))
            elif isinstance(value, (list, tuple)):
                for item in value:
                    if self._is_file(item):
                        files.append((key, self._file_part(item)))
                    else:
                        fields.append((key, item))
            else:
                fields.append((key, value))

        return MultipartBody(fields=tuple(fields), files=tuple(files))

    @staticmethod
    def _is_file(value: Any) -> bool:
        return isinstance(value, (os.PathLike, FilePart))

    def _file_part(self, value: Union[FilePart, "os.PathLike[str]"]) -> FilePart:
        if isinstance(value, FilePart):
            return value
        content = self._file_source.read_all_bytes(value)
        filename = os.fspath(value).replace("\\", "/").split("/")[-1]
        return FilePart(filename=filename, content=content, content_type=OCTET_STREAM)
