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

"""Tests for the origin fallback chain."""

import asyncio

from absl.testing import absltest
from enums import OriginSource
from enums import ResolutionStatus
from models import Fulfillment
from models import LineItem
from services.origin_service import OriginResolver
from testing_fakes import FakePlatform
from testing_fakes import WAREHOUSE

COMPLETE_ORIGIN = {
    "address1": "1 Factory Way",
    "city": "Hickory",
    "province_code": "NC",
    "zip": "28601",
    "name": "Hickory Plant",
    "phone": "828-555-0199",
}

STORE_FRONT = {
    "id": "gid://shopify/Location/5",
    "name": "Store Front",
    "address": {"address1": "5 Main St", "city": None, "zip": None},
}


def _line_item(origin=None) -> LineItem:
  return LineItem.model_validate({
      "id": 11,
      "title": "Sofa",
      "quantity": 1,
      "product_id": 501,
      "origin_location": origin,
  })


def _fulfillment(location_id=77, line_item_id=11) -> Fulfillment:
  return Fulfillment.model_validate({
      "id": 9,
      "status": "success",
      "location_id": location_id,
      "line_items": [{"id": line_item_id}],
  })


class OriginResolverTest(absltest.TestCase):

  def _resolve(self, platform, line_item, fulfillments=()):
    return asyncio.run(
        OriginResolver(platform).resolve(line_item, list(fulfillments))
    )

  def test_complete_origin_makes_no_calls(self) -> None:
    platform = FakePlatform(locations={77: WAREHOUSE}, registered=[WAREHOUSE])
    result = self._resolve(
        platform, _line_item(COMPLETE_ORIGIN), [_fulfillment()]
    )

    self.assertEqual(result.status, ResolutionStatus.COMPLETE)
    self.assertEqual(result.source, OriginSource.LINE_ITEM)
    self.assertEqual(result.location.name, "Hickory Plant")
    self.assertEmpty(platform.location_calls)
    self.assertEqual(platform.list_calls, 0)

  def test_fulfillment_location_skips_registered_list(self) -> None:
    platform = FakePlatform(locations={77: WAREHOUSE}, registered=[STORE_FRONT])
    partial = dict(COMPLETE_ORIGIN, name=None)
    result = self._resolve(platform, _line_item(partial), [_fulfillment()])

    self.assertEqual(result.source, OriginSource.FULFILLMENT_LOCATION)
    self.assertEqual(result.status, ResolutionStatus.COMPLETE)
    self.assertEqual(result.location.address1, "10 Depot Rd")
    self.assertEqual(result.location.address2, "")
    self.assertEqual(result.location.province_code, "NJ")
    self.assertEqual(result.location.name, "Main Warehouse")
    self.assertEqual(platform.location_calls, [77])
    self.assertEqual(platform.list_calls, 0)

  def test_fulfillment_for_other_item_is_ignored(self) -> None:
    platform = FakePlatform(locations={77: WAREHOUSE}, registered=[WAREHOUSE])
    result = self._resolve(
        platform, _line_item(), [_fulfillment(line_item_id=12)]
    )

    self.assertEqual(result.source, OriginSource.REGISTERED_LOCATION)
    self.assertEmpty(platform.location_calls)
    self.assertEqual(platform.list_calls, 1)

  def test_incomplete_fulfillment_location_falls_through(self) -> None:
    no_phone = {
        "name": "Dock",
        "address": dict(WAREHOUSE["address"], phone=None),
    }
    platform = FakePlatform(locations={77: no_phone}, registered=[WAREHOUSE])
    result = self._resolve(platform, _line_item(), [_fulfillment()])

    self.assertEqual(result.source, OriginSource.REGISTERED_LOCATION)
    self.assertEqual(result.location.zip, "07102")

  def test_registered_list_prefers_usable_address(self) -> None:
    platform = FakePlatform(registered=[STORE_FRONT, WAREHOUSE])
    result = self._resolve(platform, _line_item())

    self.assertEqual(result.source, OriginSource.REGISTERED_LOCATION)
    self.assertEqual(result.status, ResolutionStatus.COMPLETE)
    self.assertEqual(result.location.name, "Main Warehouse")

  def test_registered_list_falls_back_to_first_with_defaults(self) -> None:
    platform = FakePlatform(registered=[STORE_FRONT])
    result = self._resolve(platform, _line_item())

    self.assertEqual(result.status, ResolutionStatus.PARTIAL)
    self.assertEqual(result.location.address1, "5 Main St")
    self.assertEqual(result.location.city, " ")
    self.assertEqual(result.location.zip, "")
    self.assertEqual(result.location.phone, "")
    self.assertEqual(result.location.province_code, "")

  def test_no_locations_is_unresolved(self) -> None:
    result = self._resolve(FakePlatform(), _line_item())

    self.assertEqual(result.status, ResolutionStatus.UNRESOLVED)
    self.assertEqual(result.source, OriginSource.NONE)
    self.assertIsNone(result.location.address1)

  def test_query_errors_never_raise(self) -> None:
    platform = FakePlatform(fail_locations=True)
    result = self._resolve(platform, _line_item(), [_fulfillment()])

    self.assertEqual(result.status, ResolutionStatus.UNRESOLVED)
    self.assertEqual(platform.location_calls, [77])
    self.assertEqual(platform.list_calls, 1)

  def test_resolve_line_items_keeps_order(self) -> None:
    platform = FakePlatform(locations={77: WAREHOUSE})
    items = [
        _line_item(COMPLETE_ORIGIN),
        LineItem.model_validate({"id": 12, "quantity": 1}),
    ]
    resolved = asyncio.run(
        OriginResolver(platform).resolve_line_items(
            items, [_fulfillment(line_item_id=12)]
        )
    )

    self.assertEqual(resolved[0].origin_location.name, "Hickory Plant")
    self.assertEqual(resolved[1].origin_location.name, "Main Warehouse")
    self.assertIsNone(items[1].origin_location)


if __name__ == "__main__":
  absltest.main()
