from __future__ import annotations

from typing import Any

from loguru import logger

from relay.services.gitmoji import resolve_gitmoji_to_emoji
from relay.services.inline_code import DISCORD_COMMIT_LIMITS, DisplayLimits, fix_truncated_inline_code


def format_commit_message(
    message: str,
    *,
    limits: DisplayLimits = DISCORD_COMMIT_LIMITS,
    resolve_gitmoji: bool = True,
) -> str:
    # emoji first: they shorten the message before truncation is simulated
    if resolve_gitmoji:
        message = resolve_gitmoji_to_emoji(message)
    return fix_truncated_inline_code(message, limits=limits)


def format_commit_messages(
    body: Any,
    *,
    limits: DisplayLimits = DISCORD_COMMIT_LIMITS,
    resolve_gitmoji: bool = True,
) -> Any:
    """Rewrite ``commits[].message`` of a push payload for display.

    Returns a new payload; everything other than the commit messages is
    passed through untouched. Bodies without a ``commits`` list come back as
    they are.
    """
    if not isinstance(body, dict) or not isinstance(body.get("commits"), list):
        return body

    commits: list[Any] = []
    for commit in body["commits"]:
        message = commit.get("message") if isinstance(commit, dict) else None
        if not isinstance(message, str):
            commits.append(commit)
            continue
        formatted = format_commit_message(message, limits=limits, resolve_gitmoji=resolve_gitmoji)
        if formatted != message:
            logger.debug("Rewrote message of commit {}: {!r} -> {!r}", commit.get("id"), message, formatted)
        commits.append({**commit, "message": formatted})
    return {**body, "commits": commits}
