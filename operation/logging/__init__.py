# logging package
from .logging_config import (
    setup_logging,
    get_logger,
    set_session_id,
    get_session_id,
    log_function_call
)

__all__ = [
    'setup_logging',
    'get_logger',
    'set_session_id',
    'get_session_id',
    'log_function_call'
]
