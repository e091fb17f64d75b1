"""Synchronous lifecycle event dispatch via pluggy.

INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from assistctl.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class EventBus:
    """Dispatch named hooks to every registered plugin.

    Each call runs the hook inline; a failing plugin is reported back as a
    warning string and never interrupts the operation that fired the event.
    """

    def __init__(self, plugin_manager: PluginManager) -> None:
        self._pm = plugin_manager

    def dispatch(self, hook_name: str, payload: dict[str, Any]) -> list[str]:
        """Call *hook_name* with *payload*; return warnings for plugin failures."""
        hook = getattr(self._pm.hook, hook_name, None)
        if hook is None:
            logger.debug("No hook named %s", hook_name)
            return []
        try:
            hook(**payload)
        except Exception as exc:
            logger.debug("Hook %s failed", hook_name, exc_info=True)
            return [f"Plugin hook {hook_name} failed: {exc}"]
        return []
