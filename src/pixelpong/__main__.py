"""Console entrypoint for the pixelpong application.

Delegates to :mod:`pixelpong.cli` so ``python -m pixelpong`` and the
installed ``pixelpong`` console script run the same code.
"""

from __future__ import annotations

import sys

from pixelpong.cli import main as cli_main


def main() -> None:
    sys.exit(cli_main())


if __name__ == "__main__":
    main()
