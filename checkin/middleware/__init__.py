from checkin.middleware.performance import PerformanceMiddleware

__all__ = ["PerformanceMiddleware"]
