"""Output layer — formatting ApiResult for humans and machines."""
