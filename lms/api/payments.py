"""Paystack bridge endpoints.

The gateway's own status and message are passed through on failure; a
gateway timeout is a 504 the client can retry by hand.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query

from lms.api.dependencies import CurrentUser
from lms.api.errors import http_error
from lms.api.schemas import PaymentInitIn
from lms.services.errors import ServiceError
from lms.services.paystack_client import PaystackClient, get_paystack_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/paystack", tags=["payments"])

Paystack = Annotated[PaystackClient, Depends(get_paystack_client)]


@router.post("/initialize")
async def initialize_payment(
    payload: PaymentInitIn, principal: CurrentUser, paystack: Paystack
) -> dict[str, Any]:
    logger.info(
        "Payment initialize user=%s amount=%d reference=%s",
        principal.user_id,
        payload.amount,
        payload.reference,
    )
    try:
        return await paystack.initialize(
            email=payload.email,
            amount=payload.amount,
            reference=payload.reference,
            metadata=payload.metadata,
            callback_url=payload.callback_url,
        )
    except ServiceError as e:
        raise http_error(e) from None


@router.get("/verify")
async def verify_payment(
    principal: CurrentUser,
    paystack: Paystack,
    reference: Annotated[str | None, Query()] = None,
) -> dict[str, Any]:
    if not reference:
        raise HTTPException(status_code=400, detail="Reference is required")
    logger.info("Payment verify user=%s reference=%s", principal.user_id, reference)
    try:
        return await paystack.verify(reference)
    except ServiceError as e:
        raise http_error(e) from None
