"""Command group: vector stores, their files, and concurrent uploads."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from assistctl.commands._base import AssistGroup, parse_pairs
from assistctl.domain.params import VectorStoreCreate, VectorStoreUpdate
from assistctl.domain.types import ListOrder
from assistctl.domain.vector_stores import ChunkingStrategy, ExpiresAfter
from assistctl.services.upload import UploadOrchestrator

if TYPE_CHECKING:
    from assistctl.commands._context import AppContext
    from assistctl.domain.result import ApiResult
    from assistctl.services.client import ApiClient

_VECTOR_STORE_EXAMPLES = """\
  assistctl vector-store list
  assistctl vector-store create --name "Product docs" --expires-days 30
  assistctl vector-store upload vs_abc123 docs/*.pdf
  assistctl vector-store files vs_abc123
  assistctl vector-store remove-file vs_abc123 file-abc123"""

_ORDER_CHOICE = click.Choice([o.value for o in ListOrder])


@click.group("vector-store", cls=AssistGroup, examples=_VECTOR_STORE_EXAMPLES)
@click.pass_obj
def vector_store(app: AppContext) -> None:
    """Manage vector stores and the files they index."""


def _chunking(chunk_size: int | None, chunk_overlap: int | None) -> ChunkingStrategy | None:
    if chunk_size is None and chunk_overlap is None:
        return None
    size = chunk_size or 800
    overlap = chunk_overlap if chunk_overlap is not None else min(400, size // 2)
    if overlap > size // 2:
        raise click.BadParameter(
            "overlap must not exceed half the chunk size", param_hint="--chunk-overlap"
        )
    return ChunkingStrategy.fixed(size, overlap)


def _expires(days: int | None) -> ExpiresAfter | None:
    return ExpiresAfter(days=days) if days is not None else None


_chunk_options = [
    click.option(
        "--chunk-size", type=click.IntRange(100, 4096), default=None, help="Static chunk size."
    ),
    click.option(
        "--chunk-overlap", type=click.IntRange(0), default=None, help="Static chunk overlap."
    ),
]


def _with_chunk_options(fn: Any) -> Any:
    for option in reversed(_chunk_options):
        fn = option(fn)
    return fn


@vector_store.command(
    "list",
    examples="""\
  assistctl vector-store list
  assistctl -q vector-store list --limit 100""",
)
@click.option("--limit", default=20, type=click.IntRange(1, 100), help="Page size.")
@click.option("--order", type=_ORDER_CHOICE, default="desc", help="Sort order.")
@click.option("--after", default=None, help="Cursor: list after this store id.")
@click.pass_obj
def list_cmd(app: AppContext, limit: int, order: str, after: str | None) -> None:
    """List vector stores."""
    app.run(
        "list_vector_stores",
        lambda api: api.vector_stores.list(limit=limit, order=ListOrder(order), after=after),
    )


@vector_store.command(examples="  assistctl vector-store show vs_abc123")
@click.argument("vector_store_id")
@click.pass_obj
def show(app: AppContext, vector_store_id: str) -> None:
    """Show one vector store."""
    app.run("fetch_vector_store", lambda api: api.vector_stores.fetch(vector_store_id))


@vector_store.command(
    examples="""\
  assistctl vector-store create --name "Product docs"
  assistctl vector-store create --name Scratch --expires-days 7
  assistctl vector-store create --file-id file-abc --chunk-size 400 --chunk-overlap 100"""
)
@click.option("--name", default=None, help="Store name.")
@click.option("--file-id", "file_ids", multiple=True, help="Already-uploaded file (repeatable).")
@click.option(
    "--expires-days",
    type=click.IntRange(1, 365),
    default=None,
    help="Expire N days after last activity.",
)
@click.option("--metadata", multiple=True, help="KEY=VALUE metadata (repeatable).")
@_with_chunk_options
@click.pass_obj
def create(
    app: AppContext,
    name: str | None,
    file_ids: tuple[str, ...],
    expires_days: int | None,
    metadata: tuple[str, ...],
    chunk_size: int | None,
    chunk_overlap: int | None,
) -> None:
    """Create a vector store."""
    params = VectorStoreCreate(
        name=name,
        file_ids=list(file_ids) or None,
        expires_after=_expires(expires_days),
        chunking_strategy=_chunking(chunk_size, chunk_overlap),
        metadata=parse_pairs(metadata),
    )
    app.run("create_vector_store", lambda api: api.vector_stores.create(params))


@vector_store.command(
    examples="""\
  assistctl vector-store update vs_abc123 --name "Renamed"
  assistctl vector-store update vs_abc123 --expires-days 30"""
)
@click.argument("vector_store_id")
@click.option("--name", default=None, help="New name.")
@click.option(
    "--expires-days",
    type=click.IntRange(1, 365),
    default=None,
    help="Expire N days after last activity.",
)
@click.option("--metadata", multiple=True, help="KEY=VALUE metadata (repeatable).")
@click.pass_obj
def update(
    app: AppContext,
    vector_store_id: str,
    name: str | None,
    expires_days: int | None,
    metadata: tuple[str, ...],
) -> None:
    """Update a vector store; only the given options change."""
    params = VectorStoreUpdate(
        name=name, expires_after=_expires(expires_days), metadata=parse_pairs(metadata)
    )
    if not params.to_body():
        raise click.UsageError("Nothing to update: pass at least one option.")
    app.run(
        "update_vector_store", lambda api: api.vector_stores.update(vector_store_id, params)
    )


@vector_store.command(examples="  assistctl vector-store delete vs_abc123 --yes")
@click.argument("vector_store_id")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_obj
def delete(app: AppContext, vector_store_id: str, yes: bool) -> None:
    """Delete a vector store (uploaded files are kept)."""
    if not yes:
        click.confirm(f"Delete vector store {vector_store_id}?", abort=True, err=True)
    app.run("delete_vector_store", lambda api: api.vector_stores.delete(vector_store_id))


@vector_store.command(examples="  assistctl vector-store files vs_abc123 --limit 50")
@click.argument("vector_store_id")
@click.option("--limit", default=20, type=click.IntRange(1, 100), help="Page size.")
@click.option("--order", type=_ORDER_CHOICE, default="desc", help="Sort order.")
@click.option("--after", default=None, help="Cursor: list after this file id.")
@click.pass_obj
def files(
    app: AppContext, vector_store_id: str, limit: int, order: str, after: str | None
) -> None:
    """List files in a vector store."""
    app.run(
        "list_vector_store_files",
        lambda api: api.vector_stores.list_files(
            vector_store_id, limit=limit, order=ListOrder(order), after=after
        ),
    )


@vector_store.command("add-file", examples="  assistctl vector-store add-file vs_abc file-abc")
@click.argument("vector_store_id")
@click.argument("file_id")
@_with_chunk_options
@click.pass_obj
def add_file(
    app: AppContext,
    vector_store_id: str,
    file_id: str,
    chunk_size: int | None,
    chunk_overlap: int | None,
) -> None:
    """Attach an uploaded file to a vector store."""
    strategy = _chunking(chunk_size, chunk_overlap)
    app.run(
        "add_vector_store_file",
        lambda api: api.vector_stores.add_file(vector_store_id, file_id, strategy),
    )


@vector_store.command(
    "remove-file", examples="  assistctl vector-store remove-file vs_abc file-abc"
)
@click.argument("vector_store_id")
@click.argument("file_id")
@click.pass_obj
def remove_file(app: AppContext, vector_store_id: str, file_id: str) -> None:
    """Detach a file from a vector store (the file itself is kept)."""
    app.run(
        "delete_vector_store_file",
        lambda api: api.vector_stores.delete_file(vector_store_id, file_id),
    )


@vector_store.command(
    examples="""\
  assistctl vector-store batch vs_abc123 vsfb_abc123
  assistctl vector-store batch vs_abc123 vsfb_abc123 --files"""
)
@click.argument("vector_store_id")
@click.argument("batch_id")
@click.option("--files", "list_files", is_flag=True, help="List the batch's files instead.")
@click.pass_obj
def batch(app: AppContext, vector_store_id: str, batch_id: str, list_files: bool) -> None:
    """Show a file batch."""
    if list_files:
        app.run(
            "list_batch_files",
            lambda api: api.vector_stores.list_batch_files(vector_store_id, batch_id),
        )
    else:
        app.run(
            "fetch_file_batch",
            lambda api: api.vector_stores.fetch_file_batch(vector_store_id, batch_id),
        )


@vector_store.command(
    examples="""\
  assistctl vector-store upload vs_abc123 report.pdf notes.md
  assistctl vector-store upload vs_abc123 docs/*.pdf --concurrency 8 --retries 3
  assistctl vector-store upload vs_abc123 big/*.txt --backoff exponential"""
)
@click.argument("vector_store_id")
@click.argument("paths", nargs=-1, type=click.Path(path_type=Path))
@click.option("--concurrency", type=click.IntRange(1), default=None, help="Parallel uploads.")
@click.option("--retries", type=click.IntRange(0), default=None, help="Retries per file.")
@click.option("--retry-delay", type=click.FloatRange(0), default=None, help="Seconds between.")
@click.option(
    "--backoff",
    type=click.Choice(["fixed", "linear", "exponential"]),
    default=None,
    help="Retry delay growth.",
)
@_with_chunk_options
@click.pass_obj
def upload(
    app: AppContext,
    vector_store_id: str,
    paths: tuple[Path, ...],
    concurrency: int | None,
    retries: int | None,
    retry_delay: float | None,
    backoff: str | None,
    chunk_size: int | None,
    chunk_overlap: int | None,
) -> None:
    """Upload files concurrently and add them to a vector store in one batch."""
    overrides = {
        "max_concurrency": concurrency,
        "max_retries": retries,
        "retry_delay": retry_delay,
        "backoff": backoff,
    }
    config = app.settings.upload.model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    )
    strategy = _chunking(chunk_size, chunk_overlap)

    async def _upload(api: ApiClient) -> ApiResult[Any]:
        orchestrator = UploadOrchestrator.from_client(api, config)
        return await orchestrator.run(list(paths), vector_store_id, strategy)

    app.run("upload_files", _upload)
