"""File record: the leaf entity of the namespace.

A record is either built-in (``id == 0``, content fetched lazily from
``resource_locator``) or user-supplied (``id > 0``, content persisted in the
key-value store under that id). Classification is derived from the id alone.
"""

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from ..exceptions import CorruptPersistedStateError, InvalidArgumentError

BUILTIN_ID = 0


def _extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


@dataclass
class FileRecord:
    """One file available within the virtual filesystem."""

    name: str
    resource_locator: Optional[str] = None
    id: int = BUILTIN_ID
    folder_path: str = ""  # denormalized owning-folder path, persisted with content
    content: str = ""      # text/JSON inline, base64 for everything else
    loaded: bool = False

    @property
    def is_user_file(self) -> bool:
        return self.id is not None and self.id > 0

    @property
    def extension(self) -> str:
        """Extension driving content interpretation.

        User files are typed by their display name, built-ins by the
        resource they are fetched from.
        """
        if self.is_user_file or not self.resource_locator:
            return _extension(self.name)
        return _extension(self.resource_locator)

    @property
    def mime_type(self) -> str:
        ext = self.extension
        if ext == "json":
            return "application/json"
        if ext == "jpg":
            return "image/jpeg"
        return f"image/{ext}"

    @property
    def is_text(self) -> bool:
        return self.extension == "json"

    def decoded_content(self) -> Union[Any, bytes]:
        """Return the original data a user file was created from.

        JSON files are parsed; everything else is base64-decoded to bytes.

        Raises:
            InvalidArgumentError: for built-in records.
            CorruptPersistedStateError: if the stored content does not decode.
        """
        if not self.is_user_file:
            raise InvalidArgumentError(
                f"decoded_content() called on built-in file '{self.name}'", field="id"
            )
        key = f"file #{self.id}"
        if self.is_text:
            try:
                return json.loads(self.content)
            except json.JSONDecodeError as e:
                raise CorruptPersistedStateError(key, f"invalid JSON content: {e}") from e
        try:
            return base64.b64decode(self.content, validate=True)
        except (binascii.Error, ValueError) as e:
            raise CorruptPersistedStateError(key, f"invalid base64 content: {e}") from e

    def to_payload(self) -> Dict[str, str]:
        """Serializable form written to the key-value store."""
        return {
            "name": self.name,
            "folderPath": self.folder_path,
            "content": self.content,
        }

    @classmethod
    def from_payload(cls, file_id: int, payload: Dict[str, Any]) -> "FileRecord":
        """Rebuild a user record from its stored payload.

        Raises:
            CorruptPersistedStateError: if required fields are missing or mistyped.
        """
        if not isinstance(payload, dict):
            raise CorruptPersistedStateError(f"file #{file_id}", "payload is not an object")
        name = payload.get("name")
        if not isinstance(name, str) or not name:
            raise CorruptPersistedStateError(f"file #{file_id}", "missing name")
        folder_path = payload.get("folderPath") or ""
        content = payload.get("content") or ""
        if not isinstance(folder_path, str) or not isinstance(content, str):
            raise CorruptPersistedStateError(f"file #{file_id}", "folderPath/content must be strings")
        return cls(
            name=name,
            id=file_id,
            folder_path=folder_path,
            content=content,
            loaded=True,
        )
