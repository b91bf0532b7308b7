"""Pydantic models for game settings."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from pixelpong.net.client import parse_address

from .values import CONNECTION_DEFAULTS, DRAW_LOOP_DEFAULTS, PHYSICS_DEFAULTS


class PhysicsConfig(BaseModel):
    """Ball calibration values.

    Parameters
    ----------
    speed: Pixels travelled per tick.
    ball_radius: Radius of the rendered ball in pixels.
    ball_image_size: Width and height of the square ball sprite.
    goal_band: Width of the ring checked against the goal mask, inward
        from the ball's edge.
    band_width: Width of the obstacle sampling ring centered on the ball's
        edge. Defaults to ``speed``; must not be narrower.
    """

    speed: float = Field(default=float(PHYSICS_DEFAULTS["speed"]))
    ball_radius: float = Field(default=float(PHYSICS_DEFAULTS["ball_radius"]))
    ball_image_size: int = Field(default=int(PHYSICS_DEFAULTS["ball_image_size"]))
    goal_band: float = Field(default=float(PHYSICS_DEFAULTS["goal_band"]))
    band_width: float | None = Field(default=None)

    @field_validator("speed", "ball_radius", "goal_band", "band_width")
    @classmethod
    def _chk_positive(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("physics values must be > 0")
        return v

    @property
    def bounce_band(self) -> float:
        return self.speed if self.band_width is None else self.band_width

    @property
    def bounce_inner_radius(self) -> float:
        return self.ball_radius - self.bounce_band / 2.0

    @property
    def bounce_outer_radius(self) -> float:
        return self.ball_radius + self.bounce_band / 2.0

    @model_validator(mode="after")
    def _chk_band(self) -> "PhysicsConfig":
        # The sampling ring must cover the whole distance moved in one tick.
        if self.bounce_band < self.speed:
            raise ValueError("bounce band narrower than per-tick travel")
        if self.bounce_inner_radius <= 0:
            raise ValueError("bounce band too wide for ball_radius")
        if self.goal_band > self.ball_radius:
            raise ValueError("goal_band must not exceed ball_radius")
        return self


class DrawLoops(BaseModel):
    """Writer connections opened per drawable."""

    ball: int = Field(default=DRAW_LOOP_DEFAULTS["ball"], ge=0)
    field: int = Field(default=DRAW_LOOP_DEFAULTS["field"], ge=0)
    score: int = Field(default=DRAW_LOOP_DEFAULTS["score"], ge=0)


class Settings(BaseModel):
    """Persisted game settings.

    Parameters
    ----------
    server_address: Pixelflut server as ``host:port`` or ``[ipv6]:port``.
    fps: Target physics tick rate.
    draw_loops: Writer connections per drawable.
    field_image / hitbox_image / ball_image: Optional asset paths. When
        unset a procedurally generated asset sized to the canvas is used.
    font_path: Optional TrueType font for the scoreboard.
    """

    server_address: str = Field(default=str(CONNECTION_DEFAULTS["server_address"]))
    fps: float = Field(default=float(CONNECTION_DEFAULTS["fps"]))
    draw_loops: DrawLoops = Field(default_factory=DrawLoops)
    physics: PhysicsConfig = Field(default_factory=PhysicsConfig)
    field_image: str | None = Field(default=None)
    hitbox_image: str | None = Field(default=None)
    ball_image: str | None = Field(default=None)
    font_path: str | None = Field(default=None)

    @field_validator("server_address")
    @classmethod
    def _chk_address(cls, v: str) -> str:
        parse_address(v)
        return v

    @field_validator("fps")
    @classmethod
    def _chk_fps(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("fps must be > 0")
        return v
