from __future__ import annotations

from dataclasses import dataclass

import regex

BACKTICK = "`"
ZERO_WIDTH_SPACE = "\u200b"

GRAPHEME_PATTERN = regex.compile(r"\X")


@dataclass(frozen=True, slots=True)
class DisplayLimits:
    """How the display surface truncates a commit message it renders."""

    limit: int = 50
    ellipsis_width: int = 3
    separator: str = ZERO_WIDTH_SPACE
    filler: str = " "


DISCORD_COMMIT_LIMITS = DisplayLimits()


def split_graphemes(text: str) -> list[str]:
    return GRAPHEME_PATTERN.findall(text)


def is_unclosed(message: str) -> bool:
    """Return whether ``message`` leaves an inline code span open."""
    return message.count(BACKTICK) % 2 == 1


def _cutoff(length: int, limit: int, limits: DisplayLimits) -> int:
    # the surface only spends room on its ellipsis when it actually truncates
    if length > limit:
        return max(limit - limits.ellipsis_width, 0)
    return limit


def visible_prefix(
    message: str,
    limit: int | None = None,
    *,
    limits: DisplayLimits = DISCORD_COMMIT_LIMITS,
) -> str:
    """Return the part of ``message`` the display surface will render.

    Counting happens on grapheme clusters so that compound emoji are never
    cut in half.
    """
    if limit is None:
        limit = limits.limit
    graphemes = split_graphemes(message)
    return "".join(graphemes[: _cutoff(len(graphemes), limit, limits)])


def _trailing_backtick_run(graphemes: list[str]) -> int:
    """Length of the tail starting at the unmatched backtick, or 0 when it sits further back.

    In an odd prefix the unmatched backtick is always the last one.
    """
    for size in (1, 2):
        if len(graphemes) >= size and BACKTICK in graphemes[-size]:
            return size
    return 0


def fix_truncated_inline_code(message: str, *, limits: DisplayLimits = DISCORD_COMMIT_LIMITS) -> str:
    """Fix unclosed inline code after the display surface truncates ``message``.

    The full message is returned; truncation itself is left to the surface.
    Only the visible prefix is rewritten so that it ends with balanced
    backticks:

    * an opening backtick in the last two visible positions is pushed out of
      view with blank filler, since a backtick right before the ellipsis
      renders as an empty span;
    * otherwise the span is closed before the last visible character and
      reopened after an invisible separator.
    """
    if is_unclosed(message):
        message += BACKTICK

    graphemes = split_graphemes(message)
    visible = graphemes[: _cutoff(len(graphemes), limits.limit, limits)]
    visible_text = "".join(visible)

    if not is_unclosed(visible_text):
        return message

    run = _trailing_backtick_run(visible)
    if run:
        fixed = visible[:-run] + [limits.filler * run] + visible[-run:]
    else:
        fixed = visible[:-1] + [BACKTICK, limits.separator, BACKTICK, visible[-1]]

    return "".join(fixed) + message[len(visible_text):]


repair = fix_truncated_inline_code
