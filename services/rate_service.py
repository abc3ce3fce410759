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

"""Checkout rate quotes for the carrier-service callback.

A quote offers one rate per service level that the cart's eligible products
are tagged with. Each level is priced independently and concurrently; a level
that cannot be priced is left out. Whatever goes wrong, the checkout gets a
(possibly empty) list of rates and never an error.
"""

import asyncio
import logging
from typing import List, Optional

from config import AdapterConfig
from exceptions import AdapterError
from models import RateRequest
from models import Retailer
from models import ServiceLevel
from services.eligibility_service import EligibilityFilter
from services.fulfillment_service import PlatformFactory
from services.pricing_service import quote_price

logger = logging.getLogger(__name__)

FOB_PICKUP_REGION = "fob"


def _normalize(price):
  if isinstance(price, float) and price.is_integer():
    return int(price)
  return price


class RateService:
  """Prices service levels for a cart."""

  def __init__(
      self, config: AdapterConfig, provider, platform_factory: PlatformFactory
  ):
    self.config = config
    self.provider = provider
    self.platform_factory = platform_factory

  async def quote(self, shop: str, rate: RateRequest) -> List[ServiceLevel]:
    """Returns the priced service levels for a cart, or [] on any failure."""
    try:
      return await asyncio.wait_for(
          self._quote(shop, rate), timeout=self.config.quote_timeout
      )
    except asyncio.TimeoutError:
      logger.error(
          "Quote for %s exceeded %ss, returning no rates",
          shop,
          self.config.quote_timeout,
      )
    except AdapterError as e:
      logger.error("Quote for %s failed: %s", shop, e)
    return []

  async def _quote(self, shop: str, rate: RateRequest) -> List[ServiceLevel]:
    retailer = await self.provider.get_store(shop)
    platform = self.platform_factory(shop, retailer.settings.auth.access_token)

    if retailer.settings.is_last_mile_only:
      rate = rate.model_copy(
          update={
              "origin": rate.origin.model_copy(
                  update={"postal_code": FOB_PICKUP_REGION}
              )
          }
      )

    items = await EligibilityFilter(
        platform, self.config.service_codes
    ).filter_eligible(rate.items)
    if not items:
      logger.info("No eligible items in cart for %s", shop)
      return []
    rate = rate.model_copy(update={"items": items})

    codes = []
    for item in items:
      for tag in item.tags:
        if tag not in codes:
          codes.append(tag)

    levels = []
    for code in codes:
      level = self.config.service_level(code)
      if level is None:
        logger.info("Service level %s is not supported", code)
        continue
      levels.append(level)

    quoted = await asyncio.gather(
        *(self._quote_level(shop, rate, level, retailer) for level in levels)
    )
    return [
        self._present(shop, level) for level in quoted if level is not None
    ]

  async def _quote_level(
      self,
      shop: str,
      rate: RateRequest,
      level: ServiceLevel,
      retailer: Retailer,
  ) -> Optional[ServiceLevel]:
    code = level.service_code
    try:
      result = await self.provider.get_shipping_rate(
          shop, rate, code, retailer
      )
      price = quote_price(result, retailer.settings)
    except (AdapterError, TypeError, ValueError, AttributeError) as e:
      logger.error("Could not calculate %s rate for %s: %s", code, shop, e)
      return None

    if price is None:
      logger.error("Could not price %s rate for %s", code, shop)
      return None
    logger.info("Rate %s for %s: %s", code, shop, price)
    return level.model_copy(update={"total_price": _normalize(price)})

  def _present(self, shop: str, level: ServiceLevel) -> ServiceLevel:
    override = self.config.rate_overrides.get(shop, {}).get(level.service_code)
    if not override:
      return level
    return level.model_copy(update=override)
