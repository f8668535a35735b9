"""HTTP middleware."""

from neighborguard.api.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
