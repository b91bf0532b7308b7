"""Centralized value sets loaded from YAML.

Physics calibration, hitbox mask color codes, scoreboard layout and the
default draw-loop fan-out live in ``values.yml`` next to this module.

On import the YAML is parsed and merged over the literals below. A missing
or corrupt file leaves the literals in place so the game still runs.

The physics constants are tuned against the ball sprite: the radius must
match the sprite's measured pixel radius and the sampling band must be at
least as wide as the distance travelled in one tick, otherwise the ball can
tunnel through thin obstacles or bounce the wrong way.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

logger = logging.getLogger(__name__)

_PKG_DIR = Path(__file__).parent
_YAML_PATH = _PKG_DIR / "values.yml"

# --- Fallback literals ---------------------------------------------------
_FALLBACK_CONNECTION = {
    "server_address": "[::1]:1234",
    "fps": 20.0,
}
_FALLBACK_PHYSICS = {
    # Distance travelled per tick in pixels
    "speed": 10.0,
    # Measured radius of the ball sprite
    "ball_radius": 40.0,
    # Sprite is square, this is its width and height
    "ball_image_size": 80,
    # Goal check samples [radius - goal_band, radius] from the mask only
    "goal_band": 20.0,
}
_FALLBACK_MASK_COLORS = {
    "obstacle": [255, 0, 0],
    "goal_left": [0, 0, 255],
    "goal_right": [0, 255, 255],
    # Value reported for obstacle cells resolved from the mask
    "target": [255, 0, 0],
}
_FALLBACK_SCOREBOARD = {
    "margin_x": 20,
    "y": 300,
    "width": 100,
    "height": 54,
    "font_px": 60,
    "foreground": [0, 0, 0],
    "background": [255, 255, 255],
}
_FALLBACK_DRAW_LOOPS = {"ball": 1, "field": 1, "score": 1}

_connection: Dict[str, Any] = dict(_FALLBACK_CONNECTION)
_physics: Dict[str, Any] = dict(_FALLBACK_PHYSICS)
_mask_colors: Dict[str, Any] = dict(_FALLBACK_MASK_COLORS)
_scoreboard: Dict[str, Any] = dict(_FALLBACK_SCOREBOARD)
_draw_loops: Dict[str, int] = dict(_FALLBACK_DRAW_LOOPS)


def _rgb(v: Any) -> Tuple[int, int, int] | None:
    if not isinstance(v, (list, tuple)) or len(v) != 3:
        return None
    try:
        r, g, b = (int(c) for c in v)
    except (TypeError, ValueError):
        return None
    if not all(0 <= c <= 255 for c in (r, g, b)):
        return None
    return r, g, b


if _YAML_PATH.exists():  # pragma: no branch - simple path
    try:
        with _YAML_PATH.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        conn = raw.get("connection", {})
        if isinstance(conn, dict):
            addr = conn.get("server_address")
            if isinstance(addr, str) and addr:
                _connection["server_address"] = addr
            if isinstance(conn.get("fps"), (int, float)):
                _connection["fps"] = float(conn["fps"])
        phys = raw.get("physics", {})
        if isinstance(phys, dict):
            for k in ("speed", "ball_radius", "goal_band"):
                v = phys.get(k)
                if isinstance(v, (int, float)):
                    _physics[k] = float(v)
            if isinstance(phys.get("ball_image_size"), int):
                _physics["ball_image_size"] = int(phys["ball_image_size"])
        colors = raw.get("mask_colors", {})
        if isinstance(colors, dict):
            for k in _FALLBACK_MASK_COLORS:
                rgb = _rgb(colors.get(k))
                if rgb is not None:
                    _mask_colors[k] = list(rgb)
        sb = raw.get("scoreboard", {})
        if isinstance(sb, dict):
            for k in ("margin_x", "y", "width", "height", "font_px"):
                if isinstance(sb.get(k), int):
                    _scoreboard[k] = int(sb[k])
            for k in ("foreground", "background"):
                rgb = _rgb(sb.get(k))
                if rgb is not None:
                    _scoreboard[k] = list(rgb)
        loops = raw.get("draw_loops", {})
        if isinstance(loops, dict):
            for k in _FALLBACK_DRAW_LOOPS:
                v = loops.get(k)
                if isinstance(v, int) and v >= 0:
                    _draw_loops[k] = v
    except (OSError, yaml.YAMLError):  # pragma: no cover - corrupt file
        logger.warning("failed to parse %s, using built-in values", _YAML_PATH)


def _pack_rgb(v: Any) -> int:
    r, g, b = v
    return (int(r) << 16) | (int(g) << 8) | int(b)


# --- Public accessors ----------------------------------------------------
CONNECTION_DEFAULTS: Dict[str, Any] = dict(_connection)
PHYSICS_DEFAULTS: Dict[str, Any] = dict(_physics)
MASK_COLORS: Dict[str, Tuple[int, int, int]] = {
    k: (int(v[0]), int(v[1]), int(v[2])) for k, v in _mask_colors.items()
}
TARGET_COLOR: int = _pack_rgb(_mask_colors["target"])
SCOREBOARD_LAYOUT: Dict[str, Any] = dict(_scoreboard)
DRAW_LOOP_DEFAULTS: Dict[str, int] = dict(_draw_loops)

__all__ = [
    "CONNECTION_DEFAULTS",
    "PHYSICS_DEFAULTS",
    "MASK_COLORS",
    "TARGET_COLOR",
    "SCOREBOARD_LAYOUT",
    "DRAW_LOOP_DEFAULTS",
]
