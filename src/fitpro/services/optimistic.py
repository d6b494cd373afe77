"""Two-phase local/remote updates with rollback."""

import logging
from collections.abc import Awaitable, Callable

_logger = logging.getLogger(__name__)


async def apply_optimistic(
    apply: Callable[[], None],
    revert: Callable[[], None],
    commit: Callable[[], Awaitable[None]],
    *,
    action: str,
) -> bool:
    """Apply a local change, commit it remotely, revert it if the commit fails.

    ``revert`` must undo exactly what ``apply`` did. Returns True when the
    remote commit succeeded.
    """
    apply()
    try:
        await commit()
    except Exception:
        _logger.exception("Optimistic %s failed, rolling back", action)
        revert()
        return False
    return True
