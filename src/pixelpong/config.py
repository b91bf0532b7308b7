"""Runtime configuration helpers.

Builds the :class:`Settings` for one run: values.yml defaults, overlaid by
the persisted settings file, overlaid by CLI arguments when provided.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .settings.schema import Settings
from .settings.store import SettingsStore

# CLI attribute -> settings field
_TOP_LEVEL_ARGS = {
    "server_address": "server_address",
    "fps": "fps",
    "field_image": "field_image",
    "hitbox_image": "hitbox_image",
    "ball_image": "ball_image",
    "font": "font_path",
}
_DRAW_LOOP_ARGS = {
    "ball_loops": "ball",
    "field_loops": "field",
    "score_loops": "score",
}


def make_settings(*, args: Optional[object] = None) -> Settings:
    """Merge persisted settings with overrides from *args* (argparse.Namespace-like).

    Only attributes that are present and not None override; the merged
    result is validated again, so invalid CLI values raise
    ``pydantic.ValidationError``.
    """
    settings = SettingsStore.load()
    if args is None:
        return settings

    data: Dict[str, Any] = settings.model_dump()
    for attr, field in _TOP_LEVEL_ARGS.items():
        value = getattr(args, attr, None)
        if value is not None:
            data[field] = value
    for attr, field in _DRAW_LOOP_ARGS.items():
        value = getattr(args, attr, None)
        if value is not None:
            data["draw_loops"][field] = value
    return Settings.model_validate(data)
