"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides the resolved API configuration, a per-call
async client, and centralized result emission (stdout/stderr routing +
exit codes).
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import click
import httpx

from assistctl.config.logging import configure_logging
from assistctl.domain.result import ApiError, ApiResult
from assistctl.infrastructure.credentials import CredentialStore
from assistctl.output.formatters import OutputSettings, format_result
from assistctl.services.client import ApiClient

if TYPE_CHECKING:
    from assistctl.config.models import ApiConfig
    from assistctl.config.settings import AssistSettings
    from assistctl.plugins.event_bus import EventBus

Action = Callable[[ApiClient], Awaitable[ApiResult[Any]]]


def build_http_client(config: ApiConfig) -> httpx.AsyncClient:
    """The pooled HTTP session used for one CLI invocation."""
    return httpx.AsyncClient(timeout=config.timeout)


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``.  Plugins and the stored
    credential are loaded lazily so ``--help`` and ``--version`` never
    touch the filesystem beyond config discovery.
    """

    def __init__(self, settings: AssistSettings) -> None:
        self.settings = settings
        self._event_bus: EventBus | None = None
        self._api_config: ApiConfig | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def api_config(self) -> ApiConfig:
        """The ``[api]`` settings, with the stored credential as key fallback."""
        if self._api_config is None:
            config = self.settings.api
            if not config.key:
                stored = CredentialStore().load()
                if stored:
                    config = config.model_copy(update={"key": stored})
            self._api_config = config
        return self._api_config

    @property
    def event_bus(self) -> EventBus | None:
        """Plugin event bus (None when plugins are disabled)."""
        if self._event_bus is None and self.settings.plugins.enabled:
            from assistctl.plugins import EventBus, PluginManager

            pm = PluginManager()
            pm.discover_and_load()
            self._event_bus = EventBus(pm)
        return self._event_bus

    def call(self, op: str, action: Action) -> ApiResult[Any]:
        """Run *action* against a fresh ApiClient on a new event loop.

        Ctrl-C while the action runs becomes a ``CANCELLED`` failure for *op*.
        """
        config = self.api_config
        event_bus = self.event_bus

        async def _run() -> ApiResult[Any]:
            async with build_http_client(config) as http:
                api = ApiClient(config, http_client=http, event_bus=event_bus)
                return await action(api)

        try:
            return asyncio.run(_run())
        except KeyboardInterrupt:
            return ApiResult.failure(op, ApiError.cancelled("Cancelled by user"))

    def emit(self, result: ApiResult[Any]) -> None:
        """Format and output an ApiResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
            raise SystemExit(1)

    def run(self, op: str, action: Action) -> None:
        """Shorthand for ``emit(call(op, action))``."""
        self.emit(self.call(op, action))
