"""Status card output.

The card is a small JSON summary of the run. It is written to a file, or,
when the target is the process's stdout/stderr, wrapped in the terminal
escape sequence ``ESC]1338;<base64 JSON>ESC]0m`` so the CI host can render it
inline.
"""

import base64
import json
import sys
from dataclasses import asdict, dataclass, field
from typing import Any, Optional, TextIO

from ..errors import CardWriteFailed
from ..utils.log_context import FieldLogger, get_field_logger

CARD_SCHEMA = "https://drone.github.io/drone-jira/card.json"
BROWSE_URL = "https://{instance}.atlassian.net/browse/{issue}"
STDOUT_PATH = "/dev/stdout"
STDERR_PATH = "/dev/stderr"
ESCAPE_PREFIX = "\u001B]1338;"
ESCAPE_SUFFIX = "\u001B]0m"

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


@dataclass(frozen=True)
class Card:
    """Summary of a reporting run."""

    pipeline: str
    instance: str
    project: str
    state: str
    version: str
    environment: str
    url: list[str] = field(default_factory=list)


def browse_links(instance: str, issue_keys: list[str]) -> list[str]:
    """Browser links to each issue on the Jira site."""
    return [BROWSE_URL.format(instance=instance, issue=issue) for issue in issue_keys]


def marshal(data: Any) -> bytes:
    """Compact JSON with HTML-sensitive characters escaped, as UTF-8 bytes.

    Bytes smuggled in through the environment as surrogate escapes become
    U+FFFD. Any other lone surrogate raises UnicodeEncodeError.
    """
    text = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    for char, escaped in _HTML_ESCAPES.items():
        text = text.replace(char, escaped)
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace").encode("utf-8")


def encode_card(card: Card) -> bytes:
    """JSON document for ``card`` wrapped with its schema."""
    return marshal({"schema": CARD_SCHEMA, "data": asdict(card)})


def write_card_to(out: TextIO, data: bytes) -> None:
    """Write card bytes to a terminal stream inside the 1338 escape sequence."""
    encoded = base64.b64encode(data).decode("ascii")
    out.write(ESCAPE_PREFIX)
    out.write(encoded)
    out.write(ESCAPE_SUFFIX)
    out.write("\n")
    out.flush()


def write_card(
    path: str,
    card: Card,
    streams: Optional[dict[str, TextIO]] = None,
    log: Optional[FieldLogger] = None,
) -> None:
    """Write ``card`` to ``path``.

    Args:
        path: Target file, ``/dev/stdout``/``/dev/stderr`` for inline
            rendering, or empty to skip.
        card: Card to write.
        streams: Stream overrides for the sentinel paths.
        log: Logger carrying the run fields.

    Raises:
        CardWriteFailed: If the card cannot be written.
    """
    log = log or get_field_logger(__name__)
    if not path:
        log.debug("No card path configured; skipping card")
        return

    targets = {STDOUT_PATH: sys.stdout, STDERR_PATH: sys.stderr}
    targets.update(streams or {})

    try:
        data = encode_card(card)
        if path in targets:
            write_card_to(targets[path], data)
        else:
            with open(path, "wb") as f:
                f.write(data)
    except (OSError, UnicodeEncodeError) as e:
        raise CardWriteFailed(path, str(e)) from e
    log.debug(f"Wrote card to {path}")
