"""BaseClient — shared foundation for the resource client façades.

Every client receives the :class:`Transport` at construction time and an
optional :class:`EventBus`. Clients never raise for API failures: each
operation returns the :class:`ApiResult` produced by the decoder.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from assistctl.domain.result import ApiResult
    from assistctl.infrastructure.http.transport import Transport
    from assistctl.plugins.event_bus import EventBus

logger = logging.getLogger(__name__)

R = TypeVar("R", bound="ApiResult[Any]")


class BaseClient:
    """Abstract base for resource clients.

    Usage::

        class AssistantsClient(BaseClient):
            async def fetch(self, assistant_id: str) -> ApiResult[Assistant]:
                return await self._transport.request(
                    "fetch_assistant", resource_path("assistants", assistant_id), Assistant
                )
    """

    def __init__(self, transport: Transport, event_bus: EventBus | None = None) -> None:
        self._transport = transport
        self._event_bus = event_bus

    def _dispatch_event(
        self,
        result: R,
        hook_name: str,
        payload: dict[str, Any],
    ) -> R:
        """Fire a lifecycle event for a successful mutation.

        No-op for failures or when no event bus is attached.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        if not result.ok or self._event_bus is None:
            return result
        warnings = self._event_bus.dispatch(hook_name, payload)
        return result.with_warnings(warnings)
