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

"""Carrier-service callback used by Shopify checkout to fetch rates."""

import logging
from typing import Optional

import dependencies
from fastapi import APIRouter
from fastapi import Depends
from fastapi import Header
from fastapi import Request
from models import CarrierRateRequest
from models import RatesResponse
from pydantic import ValidationError
from services.rate_service import RateService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/carrier",
    response_model=RatesResponse,
    response_model_exclude_none=True,
    operation_id="carrier_rates",
)
async def carrier_rates(
    request: Request,
    x_shopify_shop_domain: Optional[str] = Header(None),
    rate_service: RateService = Depends(dependencies.get_rate_service),
) -> RatesResponse:
  """Quotes delivery rates for a cart. An empty list hides the carrier."""
  if not x_shopify_shop_domain:
    logger.warning("Rate request without a shop domain")
    return RatesResponse()

  try:
    callback = CarrierRateRequest.model_validate_json(await request.body())
  except ValidationError as e:
    logger.warning(
        "Malformed rate request from %s: %s", x_shopify_shop_domain, e
    )
    return RatesResponse()

  rates = await rate_service.quote(x_shopify_shop_domain, callback.rate)
  logger.info(
      "Responding with %d rates for %s", len(rates), x_shopify_shop_domain
  )
  return RatesResponse(rates=rates)
