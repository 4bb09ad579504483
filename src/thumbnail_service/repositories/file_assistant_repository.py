"""File-backed assistant and avatar sources.

Assistants are read from a JSON file (a list of objects with "_id", "name",
"description" and "createdByName"); avatars are image files in a directory,
named after the assistant id with any image extension.
"""

import asyncio
import json
import logging
from pathlib import Path

from thumbnail_service.config import settings
from thumbnail_service.entities import AssistantEntity

logger = logging.getLogger(__name__)


class JsonAssistantRepository:
    """Assistant lookup over a JSON document.

    This class satisfies the AssistantStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(self, assistants: list[AssistantEntity] | None = None) -> None:
        self._assistants = {a.id: a for a in assistants or []}

    @classmethod
    def from_file(cls, path: str | Path | None = None) -> "JsonAssistantRepository":
        """Load assistants from a JSON file.

        A missing file yields an empty repository.

        Args:
            path: JSON file path. If None, uses settings.assistants_file.

        Returns:
            Populated JsonAssistantRepository

        Raises:
            ValueError: If the file exists but is not a JSON list of objects
        """
        path = Path(path or settings.assistants_file)
        if not path.exists():
            logger.info("No assistants file at %s; starting empty", path)
            return cls()

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid assistants file {path}: {e}") from e

        if not isinstance(raw, list):
            raise ValueError(f"Assistants file {path} must contain a JSON list")

        assistants = [
            AssistantEntity(
                id=str(item.get("_id") or item["id"]),
                name=item["name"],
                description=item.get("description") or "",
                created_by_name=item.get("createdByName") or item.get("created_by_name") or "",
            )
            for item in raw
        ]
        logger.info("Loaded %d assistant(s) from %s", len(assistants), path)
        return cls(assistants)

    async def find_by_id(self, assistant_id: str) -> AssistantEntity | None:
        return self._assistants.get(assistant_id)


class FileAvatarRepository:
    """Avatar lookup in a directory of image files.

    This class satisfies the AvatarStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(self, avatars_dir: str | Path | None = None) -> None:
        self._avatars_dir = Path(avatars_dir or settings.avatars_dir)

    def _find_file(self, assistant_id: str) -> Path | None:
        if not self._avatars_dir.is_dir():
            return None
        # Files are named after the assistant id, extension is irrelevant
        for path in sorted(self._avatars_dir.glob(f"{assistant_id}*")):
            if path.is_file() and path.stem == assistant_id:
                return path
        return None

    async def get_avatar(self, assistant_id: str) -> bytes | None:
        """Read the avatar bytes for an assistant, or None if there is none.

        Raises:
            OSError: If the avatar file exists but cannot be read
        """
        path = self._find_file(assistant_id)
        if path is None:
            return None
        return await asyncio.to_thread(path.read_bytes)
