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

"""HTTP client for the Deliveright delivery provider API.

The provider keeps one store record per shop (settings, payment strategy and
the shop's platform access token), quotes delivery rates, and accepts new
orders. Credentials are sent as `client_id`/`client_secret` query parameters.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from exceptions import ProviderError
from exceptions import RateCalculationError
from exceptions import RetailerNotFoundError
import httpx
from models import DownstreamOrder
from models import GRAMS_PER_POUND
from models import RateRequest
from models import Retailer
from pydantic import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PRICING_TYPE = "1"


def shipment_weights(rate: RateRequest) -> Tuple[float, List[float]]:
  """Returns the total weight and the per-item weights in pounds."""
  item_weights = [
      (item.grams or 0) * item.quantity / GRAMS_PER_POUND
      for item in rate.items
  ]
  total_grams = sum((item.grams or 0) * item.quantity for item in rate.items)
  return total_grams / GRAMS_PER_POUND, item_weights


def _response_body(response: httpx.Response) -> Any:
  try:
    return response.json()
  except ValueError:
    return response.text


class DeliverightClient:
  """Client for the store, shipping-rate and order endpoints."""

  def __init__(
      self,
      host: str,
      client_id: str,
      client_secret: str,
      timeout: float = 10.0,
      transport: Optional[httpx.AsyncBaseTransport] = None,
  ):
    self.host = host.rstrip("/")
    self.client_id = client_id
    self.client_secret = client_secret
    self.timeout = timeout
    self._transport = transport

  @property
  def store_url(self) -> str:
    return f"{self.host}/api/shopify/store"

  @property
  def shipping_url(self) -> str:
    return f"{self.host}/api/shipping"

  @property
  def order_url(self) -> str:
    return f"{self.host}/api/shopify/order"

  def _credentials(self) -> List[Tuple[str, Any]]:
    return [
        ("client_id", self.client_id),
        ("client_secret", self.client_secret),
    ]

  async def _request(
      self,
      method: str,
      url: str,
      params: Optional[List[Tuple[str, Any]]] = None,
      json: Optional[Dict[str, Any]] = None,
  ) -> httpx.Response:
    try:
      async with httpx.AsyncClient(
          timeout=self.timeout, transport=self._transport
      ) as client:
        return await client.request(
            method,
            url,
            params=self._credentials() + (params or []),
            json=json,
            headers={"Content-Type": "application/json"},
        )
    except httpx.HTTPError as e:
      raise ProviderError(f"{method} {url} failed: {e!r}") from e

  async def get_store(self, identifier: str) -> Retailer:
    """Fetches the store record for a shop.

    Raises:
      RetailerNotFoundError: The provider has no store for the shop.
      ProviderError: The request failed.
    """
    response = await self._request(
        "GET", self.store_url, params=[("identifier", identifier)]
    )
    if response.status_code == 404:
      raise RetailerNotFoundError(f"Store {identifier} doesn't exist")
    if response.is_error:
      raise ProviderError(
          f"Store lookup for {identifier} returned {response.status_code}",
          response_status=response.status_code,
          response_body=_response_body(response),
      )

    body = _response_body(response)
    data = body.get("data") if isinstance(body, dict) else None
    if not data:
      raise RetailerNotFoundError(f"Store {identifier} doesn't exist")

    recipients = data.get("label_recipients") or []
    first_name = data.get("first_name")
    last_name = data.get("last_name")
    try:
      return Retailer(
          identifier=identifier,
          name=f"{first_name or ''} {last_name or ''}".strip(),
          first_name=first_name,
          last_name=last_name,
          company=data.get("company"),
          email=recipients[0].get("contact") if recipients else None,
          address=data.get("address"),
          pricing_type=data.get("default_pricing_set_type"),
          settings=data.get("shopify_settings") or {},
      )
    except ValidationError as e:
      raise ProviderError(
          f"Store record for {identifier} is malformed: {e}",
          response_status=response.status_code,
          response_body=body,
      ) from e

  async def get_shipping_rate(
      self,
      identifier: str,
      rate: RateRequest,
      service_level: str,
      retailer: Retailer,
  ) -> Dict[str, Any]:
    """Quotes one service level for a cart.

    Args:
      identifier: The shop domain.
      rate: The (already filtered) rate request. Its origin postal code is
        sent as the pickup region.
      service_level: The service-level code to quote.
      retailer: The shop's store record; supplies the pricing type.

    Returns:
      The provider's rate result, with `cost` and `accessorial_fees`.

    Raises:
      RateCalculationError: The provider could not price the shipment.
      ProviderError: The request failed.
    """
    weight, item_weights = shipment_weights(rate)
    params = [
        ("steps", 1),
        ("retailer_identifier", identifier),
        ("zip", rate.destination.postal_code),
        ("weight", weight),
        ("pickup_region", rate.origin.postal_code),
        ("service_level", service_level),
        ("pricing_type", retailer.pricing_type or DEFAULT_PRICING_TYPE),
    ]
    params.extend(("item_weight", w) for w in item_weights)

    response = await self._request("GET", self.shipping_url, params=params)
    if response.is_error:
      raise ProviderError(
          f"Rate request for {service_level} returned"
          f" {response.status_code}",
          response_status=response.status_code,
          response_body=_response_body(response),
      )

    body = _response_body(response)
    result = body.get("data") if isinstance(body, dict) else None
    if isinstance(result, dict) and result.get("errorCode"):
      raise RateCalculationError(
          f"Calculator error for {service_level}: {result}"
      )
    if not result or not result.get("cost"):
      raise RateCalculationError(
          "Calculator was not able to calculate cost"
      )
    return result

  async def submit_order(self, order: DownstreamOrder) -> Dict[str, Any]:
    """Posts an order document and returns the provider's response."""
    response = await self._request(
        "POST", self.order_url, json=order.model_dump(mode="json")
    )
    body = _response_body(response)
    if response.is_error:
      raise ProviderError(
          f"Order submission returned {response.status_code}",
          response_status=response.status_code,
          response_body=body,
      )
    return body if isinstance(body, dict) else {"response": body}
