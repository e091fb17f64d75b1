"""HTTP transport and response decoding for the REST API."""

from assistctl.infrastructure.http.decoder import decode_response
from assistctl.infrastructure.http.transport import RawResponse, Transport, resource_path

__all__ = ["RawResponse", "Transport", "decode_response", "resource_path"]
