"""ModelsClient — available model listing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from assistctl.domain.common import ListPage
from assistctl.domain.models import Model
from assistctl.services.base import BaseClient

if TYPE_CHECKING:
    from assistctl.domain.result import ApiResult


class ModelsClient(BaseClient):
    async def list(self) -> ApiResult[ListPage[Model]]:
        return await self._transport.request("list_models", "models", ListPage[Model])
