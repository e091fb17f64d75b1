"""Infrastructure layer — HTTP transport, response decoding, credential storage.

This layer depends on stdlib and third-party libs (httpx, pydantic).
It must never import from services, commands, or output; the only
exception is the ApiResult contract in ``assistctl.domain.result``.
"""
