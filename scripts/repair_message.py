from __future__ import annotations

import argparse
import sys

from config import get_settings
from relay.services.commits import format_commit_message


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print a commit message as the relay would forward it.")
    parser.add_argument("message", nargs="?", help="commit message; read from stdin when omitted")
    parser.add_argument("--no-gitmoji", action="store_true", help="leave :shortcodes: untouched")
    args = parser.parse_args(argv)

    message = args.message if args.message is not None else sys.stdin.read().rstrip("\n")
    settings = get_settings()
    print(
        format_commit_message(
            message,
            limits=settings.display_limits,
            resolve_gitmoji=settings.resolve_gitmoji and not args.no_gitmoji,
        )
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
