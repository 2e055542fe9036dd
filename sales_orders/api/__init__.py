from .client import ApiClient, ApiError, ApiResult

__all__ = ["ApiClient", "ApiError", "ApiResult"]
