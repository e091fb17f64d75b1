"""Service layer — resource clients returning ApiResult.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""
