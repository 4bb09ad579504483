"""Entity source protocols.

The documents behind a thumbnail (assistants, their avatars, the model
list) live in systems outside this service. These protocols are the only
surface the thumbnail service needs from them.
"""

from typing import Protocol, runtime_checkable

from thumbnail_service.entities import AssistantEntity, ModelEntity


@runtime_checkable
class AssistantStore(Protocol):
    """Lookup of assistant documents."""

    async def find_by_id(self, assistant_id: str) -> AssistantEntity | None:
        """Find an assistant by id.

        Args:
            assistant_id: 24-character hex object id

        Returns:
            The assistant, or None if it does not exist
        """
        ...


@runtime_checkable
class AvatarStore(Protocol):
    """Lookup of stored avatar images."""

    async def get_avatar(self, assistant_id: str) -> bytes | None:
        """Read the stored avatar for an assistant.

        Args:
            assistant_id: 24-character hex object id

        Returns:
            The raw image bytes in whatever format they were stored, or None

        Raises:
            OSError: If the avatar exists but cannot be read
        """
        ...


@runtime_checkable
class ModelRegistry(Protocol):
    """The configured list of models."""

    def find(self, model_id: str) -> ModelEntity | None:
        """Find a model by its path id.

        Args:
            model_id: Model path (may contain "/")

        Returns:
            The model, or None if it is not configured
        """
        ...
