from api.middleware.body_limit import BodySizeLimitMiddleware

__all__ = ["BodySizeLimitMiddleware"]
