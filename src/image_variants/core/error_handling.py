# src/image_variants/core/error_handling.py

import functools
import logging
from typing import Any, Callable, Type, TypeVar

from .exceptions import PipelineError

F = TypeVar("F", bound=Callable[..., Any])


def with_error_handling(error_cls: Type[PipelineError], action: str) -> Callable[[F], F]:
    """
    Decorator translating collaborator failures into pipeline errors.

    Any exception that is not already a ``PipelineError`` is logged and
    re-raised as ``error_cls``, chained to the original exception.
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            logger = logging.getLogger(func.__module__ + '.' + func.__name__)
            try:
                return func(*args, **kwargs)
            except PipelineError:
                raise
            except Exception as e:
                logger.error(f"Error in '{func.__name__}': {e}", exc_info=True)
                raise error_cls(f"Failed to {action}: {e}") from e
        return wrapper  # type: ignore[return-value]
    return decorator


def with_async_error_handling(error_cls: Type[PipelineError], action: str) -> Callable[[F], F]:
    """Coroutine flavour of :func:`with_error_handling`."""
    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            logger = logging.getLogger(func.__module__ + '.' + func.__name__)
            try:
                return await func(*args, **kwargs)
            except PipelineError:
                raise
            except Exception as e:
                logger.error(f"Error in '{func.__name__}': {e}", exc_info=True)
                raise error_cls(f"Failed to {action}: {e}") from e
        return wrapper  # type: ignore[return-value]
    return decorator


class BatchOperationContextManager:
    """
    Context manager logging the start and outcome of a batch operation.

    Exceptions raised inside the block are logged and always propagate.
    """
    def __init__(self, operation_name="Batch Operation", logger=None):
        self.operation_name = operation_name
        self.completed = 0
        self.logger = logger or logging.getLogger(
            self.__class__.__module__ + '.' + self.__class__.__name__
        )

    def __enter__(self):
        self.logger.info(f"Starting {self.operation_name}.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            failed_key = getattr(exc_val, "key", None) or "Unknown item"
            self.logger.error(
                f"{self.operation_name} aborted after {self.completed} completed item(s); "
                f"first failure on '{failed_key}': {exc_val}"
            )
        else:
            self.logger.info(
                f"{self.operation_name} completed successfully ({self.completed} item(s))."
            )
        return False

    def add_completed(self, item_identifier: str):
        """Record one successfully completed item."""
        self.completed += 1
        self.logger.debug(f"Completed '{item_identifier}' in {self.operation_name}")
