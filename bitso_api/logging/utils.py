"""
Logging helpers for API calls.
"""

import functools
import time
from typing import Callable, Optional

from .logger import get_logger


def log_api_call(api_name: str, logger_name: Optional[str] = None):
    """
    Decorator to log API calls with timing and outcome.

    Args:
        api_name: Name of the API operation being called
        logger_name: Logger name to use, defaults to the function's module
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger(logger_name or func.__module__)
            start_time = time.monotonic()

            logger.debug(f"API call started: {api_name}", extra={
                'api_name': api_name,
                'function': func.__name__
            })

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.warning(f"API call failed: {api_name}", extra={
                    'api_name': api_name,
                    'function': func.__name__,
                    'execution_time_seconds': time.monotonic() - start_time,
                    'success': False,
                    'error': str(e),
                    'error_type': type(e).__name__
                }, exc_info=True)
                raise

            logger.debug(f"API call completed: {api_name}", extra={
                'api_name': api_name,
                'function': func.__name__,
                'execution_time_seconds': time.monotonic() - start_time,
                'success': True
            })
            return result

        return wrapper
    return decorator
