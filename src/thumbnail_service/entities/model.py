"""Model domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ModelEntity:
    """A model listed on the model pages.

    Attributes:
        id: Model path (e.g. "meta-llama/Llama-3.1-8B-Instruct")
        name: Display name
        logo_url: Logo image URL, if any
        unlisted: Unlisted models never get a thumbnail
    """

    id: str
    name: str
    logo_url: str | None = None
    unlisted: bool = False
