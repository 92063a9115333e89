"""Id utilities

Ids are prefixed with their kind so they stay readable in logs and JSON:
- tab-<ms>-<rand>    - terminal tab
- pane-<ms>-<rand>   - pane leaf
- split-<ms>-<rand>  - split node
"""

import secrets
import string
import time
from enum import Enum

_ALPHABET = string.ascii_lowercase + string.digits


class IdKind(Enum):
    """Kind of generated id."""

    TAB = "tab"
    PANE = "pane"
    SPLIT = "split"


def generate_id(kind: IdKind | str) -> str:
    """Create a new unique id.

    Args:
        kind: IdKind enum or raw prefix string

    Returns:
        Id like "pane-1718000000000-k3x9qa"
    """
    if isinstance(kind, IdKind):
        kind = kind.value
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(6))
    return f"{kind}-{int(time.time() * 1000)}-{suffix}"


def short_id(node_id: str, length: int = 8) -> str:
    """Get a short display version of an id for logging.

    Keeps the random suffix, which is what distinguishes ids created in the
    same millisecond.

    Args:
        node_id: The id to shorten
        length: Maximum length (default 8)
    """
    if not node_id:
        return "unknown"
    tail = node_id.rsplit("-", 1)[-1]
    return tail[:length]
