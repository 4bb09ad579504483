"""Static model registry built from the MODELS configuration."""

import json
import logging

from thumbnail_service.config import settings
from thumbnail_service.entities import ModelEntity

logger = logging.getLogger(__name__)


class StaticModelRegistry:
    """In-memory model list.

    This class satisfies the ModelRegistry protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(self, models: list[ModelEntity] | None = None) -> None:
        self._models = list(models or [])

    @classmethod
    def from_json(cls, raw: str | None = None) -> "StaticModelRegistry":
        """Build a registry from a JSON list of model objects.

        Each object needs "id" (or "name"); "displayName", "logoUrl" and
        "unlisted" are optional.

        Args:
            raw: JSON text. If None, uses settings.models_json.

        Returns:
            Populated StaticModelRegistry

        Raises:
            ValueError: If the JSON is invalid or not a list
        """
        text = raw if raw is not None else settings.models_json
        try:
            data = json.loads(text or "[]")
        except json.JSONDecodeError as e:
            raise ValueError(f"MODELS is not valid JSON: {e}") from e

        if not isinstance(data, list):
            raise ValueError("MODELS must be a JSON list")

        models = []
        for item in data:
            model_id = item.get("id") or item["name"]
            models.append(
                ModelEntity(
                    id=model_id,
                    name=item.get("displayName") or item.get("name") or model_id,
                    logo_url=item.get("logoUrl"),
                    unlisted=bool(item.get("unlisted", False)),
                )
            )
        logger.info("Loaded %d model(s)", len(models))
        return cls(models)

    def find(self, model_id: str) -> ModelEntity | None:
        for model in self._models:
            if model.id == model_id:
                return model
        return None
