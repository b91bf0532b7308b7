"""Command-line interface for PixelPong.

``pixelpong`` and ``python -m pixelpong`` both land in :func:`main`.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError

from pixelpong import __version__
from pixelpong.app.game import Game
from pixelpong.config import make_settings
from pixelpong.errors import PixelflutError
from pixelpong.settings.store import SettingsStore

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments.

    Unset options stay None so the persisted settings and values.yml
    defaults apply (see :func:`pixelpong.config.make_settings`).
    """
    p = argparse.ArgumentParser(
        prog="pixelpong", description="Pong on a shared Pixelflut canvas"
    )
    p.add_argument(
        "-s",
        "--server-address",
        dest="server_address",
        default=None,
        help="Pixelflut server as host:port or [ipv6]:port",
    )
    p.add_argument(
        "-f",
        "--fps",
        type=float,
        default=None,
        help=(
            "Physics ticks per second to aim for; mostly limited by the "
            "latency of reading pixels"
        ),
    )
    p.add_argument("--ball-loops", dest="ball_loops", type=int, default=None)
    p.add_argument("--field-loops", dest="field_loops", type=int, default=None)
    p.add_argument("--score-loops", dest="score_loops", type=int, default=None)
    p.add_argument("--field-image", dest="field_image", default=None)
    p.add_argument("--hitbox-image", dest="hitbox_image", default=None)
    p.add_argument("--ball-image", dest="ball_image", default=None)
    p.add_argument("--font", default=None, help="TrueType font for the scoreboard")
    p.add_argument(
        "--log-level",
        dest="log_level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    p.add_argument(
        "--save",
        action="store_true",
        help="Persist the merged settings as the new defaults before starting",
    )
    p.add_argument("--version", action="store_true", help="Print version and exit")
    return p.parse_args(argv)


async def run_async(argv: list[str] | None = None) -> None:
    """Async entrypoint for programmatic usage/testing."""
    args = parse_args(argv)
    settings = make_settings(args=args)
    if args.save:
        SettingsStore.save(settings)
        logger.info("saved settings to %s", SettingsStore.settings_path())
    game = await Game.create(settings)
    await game.run()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.version:
        print(f"PixelPong {__version__}")
        return 0

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(run_async(argv))
    except KeyboardInterrupt:
        pass
    except (PixelflutError, ValidationError, ValueError, RuntimeError, OSError) as e:
        logger.error("pixelpong stopped: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
