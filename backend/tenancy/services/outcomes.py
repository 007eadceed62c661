"""Logging and metrics for mutation outcomes."""

import logging
from typing import Any

from tenancy.core.exceptions import DomainError
from tenancy.core.metrics import observe_membership_mutation
from tenancy.core.structured_logging import log_json

logger = logging.getLogger("tenancy.mutations")


def succeeded(operation: str, **fields: Any) -> None:
    observe_membership_mutation(operation=operation)
    log_json(logger, logging.INFO, operation, **fields)


def rejected(operation: str, error: DomainError, **fields: Any) -> DomainError:
    """Record a rejection and hand the error back for raising."""
    observe_membership_mutation(operation=operation, outcome=error.code)
    log_json(
        logger,
        logging.WARNING,
        f"{operation}.rejected",
        error=error.code,
        reason=error.message,
        **fields,
    )
    return error
