"""
DevFlow Backend: Service Error Translation
===========================================

What:  Wraps unexpected SQLAlchemy failures in DatabaseError.
Why:   Routes only ever see DevFlowError subclasses; driver messages (SQL,
       constraint names) stay in the server log.
How:   `with database_errors("save the answer"): ...` around storage calls.
       Application exceptions (ValidationError, DuplicateKeyError, ...) pass
       through untouched.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy.exc import SQLAlchemyError

from devflow.exceptions import DatabaseError

logger = logging.getLogger(__name__)


@contextmanager
def database_errors(operation: str, **context: Any) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Database error while trying to %s: %s", operation, str(e), exc_info=True)
        raise DatabaseError(
            message=f"Could not {operation}. Please try again.",
            context={"error_type": type(e).__name__, **context},
        ) from e
