"""Allow ``python -m chess_broadcast`` to launch a broadcast.

``--run-preview <config>`` routes to the preview window instead; the
supervisor spawns the preview consumer that way.
"""

from __future__ import annotations

import sys


def _run_preview(args: list[str]) -> int:
    from chess_broadcast.core.logging_config import configure_logging
    from chess_broadcast.preview import run_preview

    if len(args) != 1:
        print("usage: python -m chess_broadcast --run-preview <config.json>", file=sys.stderr)
        return 2

    configure_logging("info")
    return run_preview(args[0])


def main() -> None:
    if len(sys.argv) >= 2 and sys.argv[1] == '--run-preview':
        sys.exit(_run_preview(sys.argv[2:]))

    from chess_broadcast import run
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
