"""
Database utilities for connection management and error handling
"""
import asyncio
import functools
import logging
from typing import Callable, Any, TypeVar, cast, Awaitable
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

# Define a type variable for the return type of the decorated function
T = TypeVar('T')

# Exception class names treated as transient connection failures
TRANSIENT_ERRORS = (
    "ConnectionError", "OperationalError",
    "ConnectionDoesNotExistError", "ConnectionRefusedError",
)

def is_transient_error(exc: BaseException) -> bool:
    error_name = type(exc).__name__
    return any(err in error_name for err in TRANSIENT_ERRORS)

def _session_in(args: tuple, kwargs: dict):
    for value in (*args, *kwargs.values()):
        if isinstance(value, AsyncSession):
            return value
    return None

def with_db_retry(
    max_retries: int = 3,
    retry_delay: float = 0.5
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorator that retries database operations on connection errors.

    An ``AsyncSession`` passed to the wrapped function is rolled back before
    each retry.
    
    Args:
        max_retries: Maximum number of retries before giving up
        retry_delay: Base delay between retries in seconds (doubled on every attempt)
        
    Returns:
        Decorated function with retry logic
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            retries = 0
            last_error = None
            
            while retries <= max_retries:
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    if not is_transient_error(e):
                        # Not a connection error, re-raise immediately
                        raise
                    retries += 1
                    last_error = e
                    
                    if retries <= max_retries:
                        # the failed statement leaves the session unusable until rolled back
                        session = _session_in(args, kwargs)
                        if session is not None:
                            await session.rollback()
                        delay = retry_delay * (2 ** (retries - 1))  # Exponential backoff
                        logger.warning(
                            f"Database connection error in {func.__name__}: {str(e)}. "
                            f"Retrying in {delay:.2f}s... (Attempt {retries}/{max_retries})"
                        )
                        await asyncio.sleep(delay)
            
            logger.error(f"Database operation {func.__name__} failed after {max_retries} retries: {last_error}")
            raise last_error
            
        return cast(Callable[..., Awaitable[T]], wrapper)
    
    return decorator
