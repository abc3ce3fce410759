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

"""Idempotency ledger for fulfillment events.

Shopify delivers webhooks at least once, and may deliver the same event twice
concurrently. Before an order is submitted to the delivery provider it is
claimed here; only the first claim for a (shop, order) pair succeeds.
"""

import logging
from typing import Any

import db
from exceptions import LedgerError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

logger = logging.getLogger(__name__)


class IdempotencyLedger:
  """Claims orders for submission, at most once per shop and order."""

  def __init__(self, session_factory: sessionmaker):
    self.session_factory = session_factory

  async def mark_if_new(self, shop: str, order_id: Any) -> bool:
    """Claims an order.

    Args:
      shop: The shop domain.
      order_id: The platform order ID.

    Returns:
      True if this call claimed the order, False if it was already claimed.

    Raises:
      LedgerError: The claim could not be recorded. Its outcome is unknown.
    """
    order_key = str(order_id)
    try:
      async with self.session_factory() as session:
        is_new = await db.insert_processed_order(session, shop, order_key)
        await session.commit()
    except SQLAlchemyError as e:
      logger.error("Failed to claim order %s for %s: %s", order_key, shop, e)
      raise LedgerError(
          f"Could not record order {order_key} for {shop}"
      ) from e

    if not is_new:
      logger.info("Order %s for %s was already claimed", order_key, shop)
    return is_new
