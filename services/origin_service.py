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

"""Ship-from (origin) resolution for order line items.

The delivery provider needs a pickup address for every line item. Shopify
often sends an incomplete `origin_location`, so the address is resolved
through a fallback chain:

1. The line item's own origin, when all fields are present.
2. The location of the fulfillment that shipped the line item.
3. The shop's first registered location with a usable address, or its very
   first location.

Resolution never fails: when nothing is found an empty location is returned
so the order can still be built.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

from enums import OriginSource
from enums import ResolutionStatus
from exceptions import PlatformQueryError
from models import Fulfillment
from models import LineItem
from models import OriginLocation
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class OriginResolution(BaseModel):
  location: OriginLocation
  status: ResolutionStatus
  source: OriginSource


def _status(location: OriginLocation) -> ResolutionStatus:
  if location.is_complete():
    return ResolutionStatus.COMPLETE
  return ResolutionStatus.PARTIAL


def location_from_platform(node: Dict[str, Any]) -> OriginLocation:
  """Maps a platform location to an origin, keeping missing fields empty."""
  address = node.get("address") or {}
  return OriginLocation(
      address1=address.get("address1"),
      address2=address.get("address2") or "",
      city=address.get("city"),
      province_code=address.get("provinceCode"),
      zip=address.get("zip"),
      name=node.get("name"),
      phone=address.get("phone"),
  )


def location_from_registered(node: Dict[str, Any]) -> OriginLocation:
  """Maps a registered location, substituting placeholders for gaps.

  City falls back to a single space because the provider rejects an empty
  city.
  """
  address = node.get("address") or {}
  return OriginLocation(
      address1=address.get("address1") or "",
      address2=address.get("address2") or "",
      city=address.get("city") or " ",
      province_code=address.get("provinceCode") or "",
      zip=address.get("zip") or "",
      name=node.get("name") or "",
      phone=address.get("phone") or "",
  )


def _is_usable_registered(node: Dict[str, Any]) -> bool:
  address = node.get("address") or {}
  return bool(
      address.get("address1")
      and address.get("city")
      and address.get("zip")
      and address.get("phone")
  )


class OriginResolver:
  """Resolves line item origins against one shop's locations."""

  def __init__(self, platform, location_limit: int = 10):
    """Initializes the resolver.

    Args:
      platform: A ShopifyClient (or compatible) bound to the shop.
      location_limit: How many registered locations to consider.
    """
    self.platform = platform
    self.location_limit = location_limit

  async def resolve(
      self, line_item: LineItem, fulfillments: Sequence[Fulfillment]
  ) -> OriginResolution:
    """Resolves the best-available origin for one line item."""
    origin = line_item.origin_location
    if origin and origin.is_complete():
      return OriginResolution(
          location=origin,
          status=ResolutionStatus.COMPLETE,
          source=OriginSource.LINE_ITEM,
      )

    logger.warning(
        "origin_location is empty or incomplete for line item %s",
        line_item.id,
    )

    location = await self._from_fulfillment(line_item, fulfillments)
    if location:
      return OriginResolution(
          location=location,
          status=_status(location),
          source=OriginSource.FULFILLMENT_LOCATION,
      )

    location = await self._from_registered_locations()
    if location:
      return OriginResolution(
          location=location,
          status=_status(location),
          source=OriginSource.REGISTERED_LOCATION,
      )

    logger.warning(
        "No origin could be resolved for line item %s", line_item.id
    )
    return OriginResolution(
        location=OriginLocation(),
        status=ResolutionStatus.UNRESOLVED,
        source=OriginSource.NONE,
    )

  async def resolve_line_items(
      self,
      line_items: Sequence[LineItem],
      fulfillments: Sequence[Fulfillment],
  ) -> List[LineItem]:
    """Resolves every line item concurrently.

    Returns:
      Copies of the line items, in the same order, with `origin_location`
      set to the resolved location.
    """
    resolutions = await asyncio.gather(
        *(self.resolve(item, fulfillments) for item in line_items)
    )
    return [
        item.model_copy(update={"origin_location": resolution.location})
        for item, resolution in zip(line_items, resolutions)
    ]

  async def _from_fulfillment(
      self, line_item: LineItem, fulfillments: Sequence[Fulfillment]
  ) -> Optional[OriginLocation]:
    fulfillment = next(
        (
            f
            for f in fulfillments
            if f.location_id and f.contains(line_item.id)
        ),
        None,
    )
    if fulfillment is None:
      logger.warning(
          "No fulfillment with a location_id for line item %s", line_item.id
      )
      return None

    try:
      node = await self.platform.get_location(fulfillment.location_id)
    except PlatformQueryError as e:
      logger.error(
          "Error fetching location %s for fulfillment %s: %s",
          fulfillment.location_id,
          fulfillment.id,
          e,
      )
      return None

    if not node:
      logger.warning("No location found for %s", fulfillment.location_id)
      return None

    location = location_from_platform(node)
    if not location.has_address():
      logger.warning(
          "Location %s has incomplete data: %s",
          fulfillment.location_id,
          location.model_dump(),
      )
      return None
    return location

  async def _from_registered_locations(self) -> Optional[OriginLocation]:
    try:
      nodes = await self.platform.list_locations(self.location_limit)
    except PlatformQueryError as e:
      logger.error("Error fetching registered locations: %s", e)
      return None

    if not nodes:
      logger.warning("Shop has no registered locations")
      return None

    chosen = next((n for n in nodes if _is_usable_registered(n)), nodes[0])
    logger.info("Using registered location %s", chosen.get("name"))
    return location_from_registered(chosen)
