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

"""Fulfillment event handling.

This module provides the `FulfillmentService` class, which turns one
`orders/fulfilled` webhook into at most one order submission to the delivery
provider. An event moves through these states:

  RECEIVED -> CLASSIFIED -> REJECTED
                         -> ELIGIBLE -> ORIGIN_RESOLVED -> FILTERED
                            -> DUPLICATE
                            -> DEDUPED -> TRANSFORMED -> SUBMITTED | FAILED

Classification compares the customer's chosen shipping method with the
service-level catalog; orders shipped by other carriers are rejected before
anything is written. The idempotency ledger is consulted only after origins
and eligibility are settled, right before the order is transformed and
submitted.
"""

import logging
from typing import Any, Callable, List, Optional, Union

from config import AdapterConfig
from enums import EventState
from exceptions import LedgerError
from exceptions import PlatformQueryError
from exceptions import ProviderError
from exceptions import RetailerNotFoundError
from models import OrderPayload
from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError
from services.eligibility_service import EligibilityFilter
from services.ledger_service import IdempotencyLedger
from services.order_transformer import build_order
from services.origin_service import OriginResolver

logger = logging.getLogger(__name__)

FULFILLMENT_SUCCESS = "success"

# Builds a platform client for (shop, access_token).
PlatformFactory = Callable[[str, Optional[str]], Any]


class EventOutcome(BaseModel):
  """Result of handling one fulfillment event."""

  state: EventState
  shop: str
  order_id: Optional[str] = None
  webhook_id: Optional[str] = None
  transitions: List[EventState] = Field(default_factory=list)
  provider_response: Optional[Any] = None
  error: Optional[str] = None
  # True when the platform should redeliver the event.
  retryable: bool = False


class _EventLogger(logging.LoggerAdapter):

  def process(self, msg, kwargs):
    return (
        "[shop=%s order=%s webhook=%s] %s"
        % (
            self.extra["shop"],
            self.extra["order_id"],
            self.extra["webhook_id"],
            msg,
        ),
        kwargs,
    )


class _Event:
  """Mutable bookkeeping for a single event run."""

  def __init__(self, shop: str, webhook_id: Optional[str]):
    self.shop = shop
    self.webhook_id = webhook_id
    self.order_id = None
    self.transitions = [EventState.RECEIVED]
    self.log = _EventLogger(
        logger, {"shop": shop, "order_id": None, "webhook_id": webhook_id}
    )

  def set_order_id(self, order_id: Any):
    self.order_id = None if order_id is None else str(order_id)
    self.log.extra["order_id"] = self.order_id

  def advance(self, state: EventState):
    self.transitions.append(state)
    self.log.info("-> %s", state.value)

  def finish(
      self,
      state: EventState,
      error: Optional[str] = None,
      retryable: bool = False,
      provider_response: Any = None,
  ) -> EventOutcome:
    self.advance(state)
    return EventOutcome(
        state=state,
        shop=self.shop,
        order_id=self.order_id,
        webhook_id=self.webhook_id,
        transitions=list(self.transitions),
        provider_response=provider_response,
        error=error,
        retryable=retryable,
    )


class FulfillmentService:
  """Handles `orders/fulfilled` events for every shop."""

  def __init__(
      self,
      config: AdapterConfig,
      provider,
      ledger: IdempotencyLedger,
      platform_factory: PlatformFactory,
  ):
    """Initializes the service.

    Args:
      config: Adapter configuration; supplies the service-level catalog.
      provider: A DeliverightClient (or compatible).
      ledger: The idempotency ledger.
      platform_factory: Builds a platform client for a shop and its access
        token.
    """
    self.config = config
    self.provider = provider
    self.ledger = ledger
    self.platform_factory = platform_factory

  async def handle(
      self,
      shop: str,
      body: Union[bytes, str, dict],
      webhook_id: Optional[str] = None,
  ) -> EventOutcome:
    """Processes one fulfillment event.

    Args:
      shop: The shop domain the event came from.
      body: The raw webhook body, or an already decoded JSON object.
      webhook_id: The platform's delivery ID, for logging.

    Returns:
      The event outcome. Only ledger failures are marked retryable.
    """
    event = _Event(shop, webhook_id)
    log = event.log

    try:
      if isinstance(body, dict):
        order = OrderPayload.model_validate(body)
      else:
        order = OrderPayload.model_validate_json(body)
    except ValidationError as e:
      log.error("Could not parse order payload: %s", e)
      return event.finish(EventState.FAILED, error=f"Invalid payload: {e}")

    event.set_order_id(order.id)
    if event.order_id is None:
      log.error("Order payload has no id")
      return event.finish(EventState.FAILED, error="Order payload has no id")

    service_code = order.service_code
    event.advance(EventState.CLASSIFIED)
    if service_code not in self.config.service_codes:
      log.info("Shipping method %r is not a delivery service", service_code)
      return event.finish(EventState.REJECTED)
    event.advance(EventState.ELIGIBLE)

    try:
      retailer = await self.provider.get_store(shop)
    except (RetailerNotFoundError, ProviderError) as e:
      log.error("Could not load store: %s", e)
      return event.finish(EventState.FAILED, error=str(e))

    platform = self.platform_factory(shop, retailer.settings.auth.access_token)

    fulfilled = [
        f for f in order.fulfillments if f.status == FULFILLMENT_SUCCESS
    ]
    skipped = len(order.fulfillments) - len(fulfilled)
    if skipped:
      log.info("Skipping %d fulfillments that did not succeed", skipped)
    resolver = OriginResolver(platform, self.config.location_lookup_limit)
    line_items = await resolver.resolve_line_items(
        order.line_items, fulfilled
    )
    event.advance(EventState.ORIGIN_RESOLVED)

    try:
      line_items = await EligibilityFilter(
          platform, self.config.service_codes
      ).filter_eligible(line_items)
    except PlatformQueryError as e:
      log.error("Eligibility check failed, keeping all line items: %s", e)
    event.advance(EventState.FILTERED)

    try:
      is_new = await self.ledger.mark_if_new(shop, event.order_id)
    except LedgerError as e:
      log.error("Ledger unavailable, not submitting: %s", e)
      return event.finish(EventState.FAILED, error=str(e), retryable=True)
    if not is_new:
      log.info("Order was already processed")
      return event.finish(EventState.DUPLICATE)
    event.advance(EventState.DEDUPED)

    downstream = build_order(order, line_items, retailer, shop)
    event.advance(EventState.TRANSFORMED)

    try:
      response = await self.provider.submit_order(downstream)
    except ProviderError as e:
      log.error(
          "Order submission failed (status=%s): %s; response body: %s",
          e.response_status,
          e,
          e.response_body,
      )
      return event.finish(
          EventState.FAILED, error=str(e), provider_response=e.response_body
      )

    log.info("Order submitted with service level %s", service_code)
    return event.finish(EventState.SUBMITTED, provider_response=response)
