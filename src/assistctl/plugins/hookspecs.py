"""Pluggy hook specifications for assistctl lifecycle events.

Events fire after a mutation succeeds on the remote API. Plugins observe;
they cannot veto or alter the result.
"""

from __future__ import annotations

import pluggy

PROJECT_NAME = "assistctl"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class AssistctlHookSpec:
    """Hook specifications for the assistctl plugin system."""

    @hookspec
    def post_create(self, resource: str, resource_id: str, name: str | None) -> None:
        """Called after an assistant, thread, vector store, or message is created."""

    @hookspec
    def post_update(self, resource: str, resource_id: str, fields_changed: list[str]) -> None:
        """Called after a resource is modified."""

    @hookspec
    def post_delete(self, resource: str, resource_id: str) -> None:
        """Called after a resource is deleted."""

    @hookspec
    def post_upload(self, vector_store_id: str, file_ids: list[str], failed: list[str]) -> None:
        """Called after a concurrent upload associated files with a vector store.

        *failed* holds the names of files that did not upload.
        """
