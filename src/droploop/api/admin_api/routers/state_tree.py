"""State tree bootstrap API route."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from prometheus_client import Counter

from ....application.treasury.dtos import (
    OperationErrorResponseDTO,
    StateTreeInitResponseDTO,
)
from ....application.treasury.use_cases.state_tree import StateTreeSetupService
from ....domain.errors import OperationError
from ..dependencies import get_state_tree_setup_service
from ..errors import operation_error_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["token"])

state_tree_bootstrap_total = Counter(
    "droploop_state_tree_bootstrap_total",
    "State tree bootstrap attempts by outcome",
    ["outcome"],
)


@router.post(
    "/init-state-tree",
    response_model=StateTreeInitResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        500: {
            "model": OperationErrorResponseDTO,
            "description": (
                "Bootstrap failed. An unfunded admin also lands here, with "
                "code INSUFFICIENT_FUNDS, currentLamports and requiredLamports."
            ),
        },
    },
)
async def init_state_tree(
    force: bool = Query(False, description="Skip the already-initialized check"),
    service: StateTreeSetupService = Depends(get_state_tree_setup_service),
):
    """One-time setup required before compressed tokens can be transferred."""
    logger.info("Initializing state tree (force=%s)", force)
    try:
        result = await service.initialize(force=force)
    except OperationError as e:
        logger.error("State tree initialization failed [%s]: %s", e.kind, e.message)
        state_tree_bootstrap_total.labels(outcome=e.kind).inc()
        # every bootstrap failure is a 500, insufficient funds included
        return operation_error_response(
            e, insufficient_funds_status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )
    except Exception as e:
        logger.exception("Unexpected error initializing state tree: %s", e)
        state_tree_bootstrap_total.labels(outcome="server_error").inc()
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": "State tree initialization failed",
                "details": str(e),
            },
        )

    outcome = "already_initialized" if result.already_initialized else "created"
    state_tree_bootstrap_total.labels(outcome=outcome).inc()
    return StateTreeInitResponseDTO.from_result(result)
