"""
Shared API dependencies and error rendering.
"""

import logging
from typing import Optional

from fastapi import Header, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ledger.core.exceptions import LedgerError, StorageFailure

logger = logging.getLogger(__name__)


def get_actor_id(x_actor_id: Optional[str] = Header(None, max_length=36)) -> Optional[str]:
    """
    Identity of the authenticated caller.
    Set by the upstream authentication layer; absent for system actions.
    """
    return x_actor_id


def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """Render a typed ledger error as a stable code and message."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "detail": exc.detail},
    )


def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Database errors raised outside an atomic unit, e.g. on plain reads."""
    logger.exception("Storage error while handling %s %s", request.method, request.url.path)
    return ledger_error_handler(request, StorageFailure())
