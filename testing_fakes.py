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

"""In-memory stand-ins for the platform, provider and ledger used in tests."""

import copy
from typing import Any, Dict, List, Optional

from config import AdapterConfig
from exceptions import LedgerError
from exceptions import PlatformQueryError
from exceptions import ProviderError
from exceptions import RateCalculationError
from exceptions import RetailerNotFoundError
from models import Retailer
from models import ServiceLevel

SHOP = "test-shop.myshopify.com"

WAREHOUSE = {
    "id": "gid://shopify/Location/77",
    "name": "Main Warehouse",
    "address": {
        "address1": "10 Depot Rd",
        "address2": None,
        "city": "Newark",
        "provinceCode": "NJ",
        "zip": "07102",
        "phone": "973-555-0100",
    },
}


def make_config(**overrides) -> AdapterConfig:
  values = dict(
      deliveright_host="https://provider.test",
      deliveright_client_id="client-id",
      deliveright_client_secret="client-secret",
      service_levels=(
          ServiceLevel(
              service_code="wg",
              service_name="White Glove Service",
              description="White-Glove delivery",
          ),
          ServiceLevel(
              service_code="rocpa",
              service_name="Room of choice with Assembly",
              description="Room of choice",
          ),
          ServiceLevel(
              service_code="curb",
              service_name="Curbside",
              description="Curbside delivery",
          ),
      ),
  )
  values.update(overrides)
  return AdapterConfig(**values)


def make_retailer(
    delivery_type: int = 2, payment: Optional[Dict[str, Any]] = None
) -> Retailer:
  return Retailer.model_validate({
      "identifier": SHOP,
      "name": "Test Shop",
      "company": "Test Shop LLC",
      "pricing_type": "1",
      "settings": {
          "delivery_type": delivery_type,
          "payment": payment or {"type": 0},
          "auth": {"access_token": "shpat_test"},
      },
  })


class FakePlatform:
  """Records every query and answers from fixed data."""

  def __init__(
      self,
      locations: Optional[Dict[Any, Dict[str, Any]]] = None,
      registered: Optional[List[Dict[str, Any]]] = None,
      tags: Optional[Dict[int, List[str]]] = None,
      fail_locations: bool = False,
      fail_tags: bool = False,
  ):
    self.locations = locations or {}
    self.registered = registered or []
    self.tags = tags or {}
    self.fail_locations = fail_locations
    self.fail_tags = fail_tags
    self.location_calls = []
    self.list_calls = 0
    self.tag_calls = []

  async def get_location(self, location_id):
    self.location_calls.append(location_id)
    if self.fail_locations:
      raise PlatformQueryError("location lookup failed")
    return copy.deepcopy(self.locations.get(location_id))

  async def list_locations(self, first=10):
    self.list_calls += 1
    if self.fail_locations:
      raise PlatformQueryError("location list failed")
    return copy.deepcopy(self.registered[:first])

  async def get_product_tags(self, product_ids):
    product_ids = list(product_ids)
    self.tag_calls.append(product_ids)
    if self.fail_tags:
      raise PlatformQueryError("tag query failed")
    return {
        pid: list(self.tags[pid]) for pid in product_ids if pid in self.tags
    }


class FakeProvider:
  """Delivery provider that prices from a table and records submissions."""

  def __init__(
      self,
      retailer: Optional[Retailer] = None,
      rates: Optional[Dict[str, Dict[str, Any]]] = None,
      submit_error: Optional[ProviderError] = None,
      store_error: Optional[ProviderError] = None,
  ):
    self.retailer = retailer
    self.rates = rates or {}
    self.submit_error = submit_error
    self.store_error = store_error
    self.store_calls = []
    self.rate_calls = []
    self.submitted = []

  async def get_store(self, identifier):
    self.store_calls.append(identifier)
    if self.store_error:
      raise self.store_error
    if self.retailer is None:
      raise RetailerNotFoundError(f"Store {identifier} doesn't exist")
    return self.retailer

  async def get_shipping_rate(self, identifier, rate, service_level, retailer):
    del retailer  # Unused.
    self.rate_calls.append((identifier, rate, service_level))
    if service_level not in self.rates:
      raise RateCalculationError("Calculator was not able to calculate cost")
    return self.rates[service_level]

  async def submit_order(self, order):
    self.submitted.append(order)
    if self.submit_error:
      raise self.submit_error
    return {"status": "ok", "order_id": "DR-1"}


class FakeLedger:
  """Set-backed ledger; optionally fails every claim."""

  def __init__(self, fail: bool = False):
    self.fail = fail
    self.claimed = set()
    self.calls = []

  async def mark_if_new(self, shop, order_id):
    self.calls.append((shop, str(order_id)))
    if self.fail:
      raise LedgerError("database is locked")
    key = (shop, str(order_id))
    if key in self.claimed:
      return False
    self.claimed.add(key)
    return True


def order_body(code="wg", **overrides) -> dict:
  """Returns an `orders/fulfilled` webhook body for order 1001."""
  body = {
      "id": 1001,
      "name": "#1001",
      "order_number": 1,
      "customer": {"first_name": "Ada", "last_name": "Lovelace"},
      "shipping_address": {
          "address1": "1 Park Ave",
          "city": "New York",
          "province_code": "NY",
          "zip": "10016",
          "phone": "212-555-0101",
      },
      "line_items": [
          {
              "id": 11,
              "sku": "SOFA-1",
              "title": "Sofa",
              "quantity": 1,
              "price": "1299.00",
              "grams": 45359,
              "product_id": 501,
              "origin_location": {"name": "Hickory"},
          },
          {
              "id": 12,
              "title": "Throw pillow",
              "quantity": 2,
              "price": "25.00",
              "product_id": 502,
          },
      ],
      "fulfillments": [{
          "id": 9,
          "status": "success",
          "location_id": 77,
          "line_items": [{"id": 11}, {"id": 12}],
      }],
      "shipping_lines": [{"code": code}],
  }
  body.update(overrides)
  return body
