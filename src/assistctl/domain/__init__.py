"""Domain layer — wire DTOs, request parameter models, and the ApiResult contract.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
