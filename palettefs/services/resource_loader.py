"""Fetches built-in file content from the bundled resource directory."""

import base64
import logging
from pathlib import Path
from typing import Union

from ..exceptions import FileRecordNotFoundError, InvalidArgumentError
from ..models import FileRecord

logger = logging.getLogger(__name__)


class ResourceLoader:
    """Resolves ``resource_locator`` values relative to a root directory.

    JSON resources are returned as text, everything else base64-encoded, so
    built-in content has the same shape as user-supplied content.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    def path_for(self, locator: str) -> Path:
        if not locator:
            raise InvalidArgumentError("Resource locator is empty", field="resource_locator")
        candidate = (self.root / locator).resolve()
        if candidate != self.root and self.root not in candidate.parents:
            raise InvalidArgumentError(
                f"Resource locator escapes the resource root: {locator}",
                field="resource_locator",
            )
        return candidate

    def fetch(self, record: FileRecord) -> str:
        path = self.path_for(record.resource_locator or "")
        if not path.is_file():
            logger.warning("Built-in resource missing", extra={"resource": record.resource_locator})
            raise FileRecordNotFoundError(record.resource_locator)
        if record.is_text:
            return path.read_text(encoding="utf-8")
        return base64.b64encode(path.read_bytes()).decode("ascii")
