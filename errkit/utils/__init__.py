from .formatting import format_error
from .handlers import (
    ErrorOrigin,
    GlobalErrorHandlers,
    global_handlers,
    setup_global_error_handlers,
    with_error_handling,
    log_retry
)

__all__ = [
    'format_error',
    'ErrorOrigin',
    'GlobalErrorHandlers',
    'global_handlers',
    'setup_global_error_handlers',
    'with_error_handling',
    'log_retry'
]
