"""
Multipart form module
"""

from retro_http.forms.form_data import (
    RetroFormData,
    MultipartBody,
    FilePart,
    FileSource,
    LocalFileSource,
    OCTET_STREAM,
)

__all__ = [
    "RetroFormData",
    "MultipartBody",
    "FilePart",
    "FileSource",
    "LocalFileSource",
    "OCTET_STREAM",
]
