"""Assistant domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AssistantEntity:
    """An assistant whose thumbnail can be rendered.

    Attributes:
        id: 24-character hex object id
        name: Display name
        description: Free-form description (may be empty)
        created_by_name: Creator label shown on the thumbnail
    """

    id: str
    name: str
    description: str = ""
    created_by_name: str = ""
