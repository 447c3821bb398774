"""
Performance monitoring for outbound API calls and incoming requests
"""

import logging
import time

from flask import current_app, g, has_app_context, request

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """Context manager timing one remote operation"""

    def __init__(self, operation_name, log_threshold=1.0):
        self.operation_name = operation_name
        self.log_threshold = log_threshold
        self.start_time = None
        self.duration = None

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.time() - self.start_time

        if exc_type:
            logger.error(
                f"Operation '{self.operation_name}' failed after {self.duration:.3f}s: {exc_val}"
            )
        elif self.duration > self.log_threshold:
            logger.warning(
                f"Slow operation '{self.operation_name}' took {self.duration:.3f}s "
                f"(threshold: {self.log_threshold}s)"
            )
        else:
            logger.debug(
                f"Operation '{self.operation_name}' completed in {self.duration:.3f}s"
            )

        # Store in Flask's g for request-level aggregation
        if has_app_context():
            metrics = g.setdefault("performance_metrics", [])
            metrics.append(
                {
                    "operation": self.operation_name,
                    "duration": self.duration,
                    "success": exc_type is None,
                }
            )


def track_request_performance():
    """Track overall request performance"""
    g.request_start_time = time.time()


def log_request_performance(response):
    """Log request performance summary"""
    if not hasattr(g, "request_start_time"):
        return response

    total_duration = time.time() - g.request_start_time

    # Log slow requests
    threshold = current_app.config.get("SLOW_REQUEST_THRESHOLD", 2.0)
    if total_duration > threshold:
        logger.warning(
            f"Slow request: {request.method} {request.path} "
            f"took {total_duration:.2f}s (threshold: {threshold}s)"
        )

        # Log individual remote calls if available
        for metric in g.get("performance_metrics", []):
            logger.info(
                f"  - {metric['operation']}: {metric['duration']:.3f}s "
                f"({'success' if metric['success'] else 'failed'})"
            )

    return response
