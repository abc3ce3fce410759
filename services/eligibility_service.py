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

"""Keeps only line items whose products are tagged with a service level."""

import logging
from typing import Iterable, List, Sequence, TypeVar, Union

from models import LineItem
from models import RateItem

logger = logging.getLogger(__name__)

Item = TypeVar("Item", bound=Union[LineItem, RateItem])


class EligibilityFilter:
  """Filters cart or order items by product tags.

  A merchant marks a product as deliverable by tagging it with one or more
  service-level codes. Items of untagged products are handled by other
  carriers and are dropped here.
  """

  def __init__(self, platform, service_codes: Iterable[str]):
    self.platform = platform
    self.service_codes = frozenset(service_codes)

  async def filter_eligible(self, items: Sequence[Item]) -> List[Item]:
    """Returns the eligible items, in input order, with matching tags set.

    Raises:
      PlatformQueryError: The product tag query failed.
    """
    product_ids = list(
        dict.fromkeys(
            item.product_id for item in items if item.product_id is not None
        )
    )
    if not product_ids:
      logger.info("No products to check for service-level tags")
      return []

    tags_by_product = await self.platform.get_product_tags(product_ids)

    eligible = []
    for item in items:
      if item.product_id not in tags_by_product:
        logger.warning("Product %s was not found", item.product_id)
        continue
      matching = [
          tag
          for tag in tags_by_product[item.product_id]
          if tag in self.service_codes
      ]
      if not matching:
        logger.info(
            "Product %s has no service-level tags, skipping",
            item.product_id,
        )
        continue
      eligible.append(item.model_copy(update={"tags": matching}))
    return eligible
