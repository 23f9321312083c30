"""Text helpers shared by the notification workers."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Iterable

from .types import ComponentRef

_MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

# A word is a run of letters, digits and underscores, possibly joined by apostrophes.
_WORD = re.compile(r"\w+(?:['\u2019]\w+)*")


def slack_hyperlink(link: str, name: str) -> str:
    """Return a Slack mrkdwn link to link labelled name."""
    return f"<{link}|{name}>"


def markdown_hyperlink(name: str, link: str) -> str:
    """Return a Markdown link to link labelled name."""
    return f"[{name}]({link})"


def components_to_str(components: Iterable[ComponentRef]) -> str:
    """Join the component names with commas."""
    return ", ".join(component.name for component in components)


def _title_word(match: re.Match[str]) -> str:
    word = match.group(0)
    return word[:1].upper() + word[1:].lower()


def title_case(text: str) -> str:
    """Upper-case the first letter of each word and lower-case the rest."""
    return _WORD.sub(_title_word, text)


def rfc822(moment: datetime) -> str:
    """Format a time in UTC as '02 Jan 06 15:04 UTC'; naive times are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    utc = moment.astimezone(timezone.utc)
    return (
        f"{utc.day:02d} {_MONTHS[utc.month - 1]} {utc.year % 100:02d} "
        f"{utc.hour:02d}:{utc.minute:02d} UTC"
    )