"""
Utility functions for the PDF Chat application.
"""

import functools
import secrets
import string
import time
import uuid
from typing import Dict, Any, Optional
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

RANDOM_ID_ALPHABET = string.ascii_letters + string.digits


def generate_conversation_id() -> str:
    """Generate a unique conversation ID."""
    return str(uuid.uuid4())


def generate_random_id(length: int) -> str:
    """Generate a short random alphanumeric identifier."""
    if length < 1:
        raise ValueError("length must be positive")
    return "".join(secrets.choice(RANDOM_ID_ALPHABET) for _ in range(length))


def chat_path(conversation_id: str) -> str:
    """Display route of a conversation."""
    return f"/chat/{conversation_id}"


def format_timestamp() -> str:
    """Get current timestamp in ISO format."""
    return datetime.utcnow().isoformat()


def measure_time(func):
    """Decorator to measure function execution time."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        result = func(*args, **kwargs)
        execution_time = time.time() - start_time

        logger.info(f"{func.__name__} executed in {execution_time:.2f} seconds")
        return result
    return wrapper


def log_processing_info(operation: str, details: Dict[str, Any]) -> None:
    """Log processing information."""
    logger.info(f"{operation}: {details}")


def handle_processing_error(operation: str, error: Exception, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Handle and log processing errors."""
    error_info = {
        'operation': operation,
        'error_type': type(error).__name__,
        'error_message': str(error),
        'timestamp': format_timestamp()
    }

    if context:
        error_info.update(context)

    logger.error(f"Processing error: {error_info}")
    return error_info
