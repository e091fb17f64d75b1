"""ApiClient — every resource façade over one shared transport."""

from __future__ import annotations

from types import TracebackType
from typing import TYPE_CHECKING, Self

from assistctl.infrastructure.http.transport import Transport
from assistctl.services.assistants import AssistantsClient
from assistctl.services.files import FilesClient
from assistctl.services.models import ModelsClient
from assistctl.services.threads import ThreadsClient
from assistctl.services.vector_stores import VectorStoresClient

if TYPE_CHECKING:
    import httpx

    from assistctl.config.models import ApiConfig
    from assistctl.plugins.event_bus import EventBus


class ApiClient:
    """Entry point for library use.

    Usage::

        async with ApiClient(ApiConfig(key="sk-...")) as api:
            result = await api.assistants.create(AssistantCreate(model="gpt-4"))
            if result.ok:
                print(result.value.id)

    The credential is fixed for the client's lifetime; to switch keys,
    build a new client.
    """

    def __init__(
        self,
        config: ApiConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self.transport = Transport(config, http_client)
        self.assistants = AssistantsClient(self.transport, event_bus)
        self.threads = ThreadsClient(self.transport, event_bus)
        self.vector_stores = VectorStoresClient(self.transport, event_bus)
        self.files = FilesClient(self.transport, event_bus)
        self.models = ModelsClient(self.transport, event_bus)
        self.event_bus = event_bus

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.transport.aclose()
