#   Copyright 2026 UCP Authors
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.

"""Shopify webhook intake."""

import logging
from typing import Any

import dependencies
from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Request
from fastapi.responses import JSONResponse
from services.fulfillment_service import FulfillmentService

logger = logging.getLogger(__name__)

router = APIRouter()

ORDERS_FULFILLED = "orders/fulfilled"

# Privacy webhooks every public app must acknowledge. The adapter keeps no
# customer data, so there is nothing to export or erase.
GDPR_TOPICS = frozenset({
    "customers/data_request",
    "customers/redact",
    "shop/redact",
})


@router.post("/api/webhooks", operation_id="receive_webhook")
async def receive_webhook(
    request: Request,
    headers: dependencies.WebhookHeaders = Depends(
        dependencies.verify_webhook
    ),
    fulfillment_service: FulfillmentService = Depends(
        dependencies.get_fulfillment_service
    ),
) -> Any:
  """Dispatches a verified webhook by topic."""
  if headers.topic in GDPR_TOPICS:
    logger.info(
        "Acknowledged %s webhook from %s", headers.topic, headers.shop_domain
    )
    return {"status": "acknowledged"}

  if headers.topic != ORDERS_FULFILLED:
    logger.warning(
        "Unhandled webhook topic %s from %s",
        headers.topic,
        headers.shop_domain,
    )
    raise HTTPException(
        status_code=404, detail=f"Unhandled topic {headers.topic}"
    )

  outcome = await fulfillment_service.handle(
      headers.shop_domain, await request.body(), headers.webhook_id
  )
  # Only a ledger failure asks Shopify to redeliver; everything else is final.
  status_code = 503 if outcome.retryable else 200
  return JSONResponse(
      status_code=status_code, content=outcome.model_dump(mode="json")
  )
