from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from pixelpong.config import make_settings
from pixelpong.settings.schema import PhysicsConfig, Settings
from pixelpong.settings.store import SettingsStore


def test_load_defaults(isolated_home: Path) -> None:
    s = SettingsStore.load()
    assert isinstance(s, Settings)
    assert s.server_address == "[::1]:1234"
    assert s.fps == 20.0
    assert s.physics.ball_radius == 40.0
    assert s.physics.speed == 10.0


def test_settings_path_follows_home(isolated_home: Path) -> None:
    assert SettingsStore.settings_path() == isolated_home / "settings.json"


def test_roundtrip(isolated_home: Path) -> None:
    s = Settings(server_address="127.0.0.1:4000", fps=30.0)
    SettingsStore.save(s)
    s2 = SettingsStore.load()
    assert s2.server_address == "127.0.0.1:4000"
    assert s2.fps == 30.0
    assert not (isolated_home / "settings.tmp").exists()


def test_corrupt_returns_default(isolated_home: Path) -> None:
    p = SettingsStore.settings_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text("{broken")
    assert SettingsStore.load().server_address == "[::1]:1234"


def test_invalid_values_return_default(isolated_home: Path) -> None:
    SettingsStore.settings_path().write_text(json.dumps({"fps": -1}))
    assert SettingsStore.load().fps == 20.0


def test_physics_bounce_ring() -> None:
    p = PhysicsConfig(speed=10.0, ball_radius=40.0)
    assert p.bounce_inner_radius == 35.0
    assert p.bounce_outer_radius == 45.0


@pytest.mark.parametrize("speed", [0.1, 0.3, 3.3, 7.1, 9.99])
def test_physics_accepts_inexact_speeds(speed: float) -> None:
    p = PhysicsConfig(speed=speed, ball_radius=40.0)
    assert p.bounce_band == speed
    assert p.bounce_inner_radius < 40.0 < p.bounce_outer_radius


def test_physics_wider_band() -> None:
    p = PhysicsConfig(speed=10.0, ball_radius=40.0, band_width=16.0)
    assert (p.bounce_inner_radius, p.bounce_outer_radius) == (32.0, 48.0)


def test_inexact_speed_survives_store_roundtrip(isolated_home: Path) -> None:
    SettingsStore.save(Settings(physics=PhysicsConfig(speed=3.3)))
    assert SettingsStore.load().physics.speed == 3.3


@pytest.mark.parametrize(
    "kwargs",
    [
        {"speed": 10.0, "band_width": 9.0},
        {"band_width": 0.0},
        {"speed": 0.0},
        {"speed": 90.0, "ball_radius": 40.0},
        {"goal_band": 50.0, "ball_radius": 40.0},
        {"ball_radius": -1.0},
    ],
)
def test_physics_rejects_bad_values(kwargs: dict) -> None:
    with pytest.raises(ValidationError):
        PhysicsConfig(**kwargs)


@pytest.mark.parametrize("addr", ["localhost", "[::1]", "host:notaport"])
def test_settings_rejects_bad_address(addr: str) -> None:
    with pytest.raises(ValidationError):
        Settings(server_address=addr)


def test_make_settings_without_args(isolated_home: Path) -> None:
    SettingsStore.save(Settings(fps=12.0))
    assert make_settings().fps == 12.0


def test_make_settings_overrides(isolated_home: Path) -> None:
    SettingsStore.save(Settings(fps=12.0, server_address="10.0.0.1:1234"))
    args = SimpleNamespace(
        server_address=None,
        fps=50.0,
        ball_loops=4,
        field_loops=None,
        score_loops=0,
        font="/tmp/font.ttf",
    )
    s = make_settings(args=args)
    assert s.server_address == "10.0.0.1:1234"
    assert s.fps == 50.0
    assert (s.draw_loops.ball, s.draw_loops.field, s.draw_loops.score) == (4, 1, 0)
    assert s.font_path == "/tmp/font.ttf"


def test_make_settings_validates_overrides(isolated_home: Path) -> None:
    with pytest.raises(ValidationError):
        make_settings(args=SimpleNamespace(ball_loops=-1))
