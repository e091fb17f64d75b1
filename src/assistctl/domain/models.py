"""Model listing DTO."""

from __future__ import annotations

from assistctl.domain.common import WireModel

REASONING_PREFIXES = ("o1", "o3", "o4")


def is_reasoning_model(model_id: str) -> bool:
    """Reasoning-family models take ``reasoning_effort`` instead of sampling knobs."""
    return model_id.lower().startswith(REASONING_PREFIXES)


class Model(WireModel):
    id: str
    object: str = "model"
    created: int | None = None
    owned_by: str | None = None

    @property
    def reasoning(self) -> bool:
        return is_reasoning_model(self.id)
