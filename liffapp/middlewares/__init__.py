from liffapp.middlewares.error_middleware import error_middleware
from liffapp.middlewares.rate_limit_middleware import SlidingWindowLimiter, rate_limit_middleware

__all__ = ["error_middleware", "rate_limit_middleware", "SlidingWindowLimiter"]
