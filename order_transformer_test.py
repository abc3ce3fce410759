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

"""Tests for the provider order document builder."""

from absl.testing import absltest
from models import OrderPayload
from services import order_transformer
from testing_fakes import make_retailer
from testing_fakes import SHOP

ORIGIN = {
    "address1": "10 Depot Rd",
    "city": "Newark",
    "province_code": "NJ",
    "zip": "07102",
    "name": "Main Warehouse",
    "phone": "973-555-0100",
}


def _order(**overrides) -> OrderPayload:
  data = {
      "id": 1001,
      "name": "#1001",
      "order_number": 1,
      "customer": {
          "first_name": "Ada",
          "last_name": "Lovelace",
          "email": "ada@example.com",
          "phone": "212-555-0000",
      },
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
              "vendor": "Hickory",
              "product_id": 501,
              "origin_location": ORIGIN,
          },
          {
              "id": 12,
              "title": "Gift card",
              "quantity": 1,
              "price": "50.00",
              "product_id": 502,
          },
      ],
      "shipping_lines": [{"code": "wg", "title": "White Glove"}],
  }
  data.update(overrides)
  return OrderPayload.model_validate(data)


class BuildOrderTest(absltest.TestCase):

  def test_envelope(self) -> None:
    raw = _order()
    order = order_transformer.build_order(
        raw, raw.line_items[:1], make_retailer(), SHOP
    )
    body = order.order

    self.assertEqual(body.source, "shopify")
    self.assertEqual(body.sales_order_number, "#1001")
    self.assertEqual(body.ref_order_number, "1001")
    self.assertEqual(body.service_level, "wg")
    self.assertEqual(body.retailer.identifier, SHOP)
    self.assertFalse(body.send_retailer_confirmation)
    self.assertEqual(body.note, "")
    self.assertEqual(body.label_recipients, [])
    self.assertTrue(order.options.send_retailer_confirmation)
    self.assertTrue(order.options.send_labels_to_manufacturer)
    self.assertEqual(body.payload.shopify_order_number, 1)

  def test_line_item_mapping(self) -> None:
    raw = _order()
    order = order_transformer.build_order(
        raw, raw.line_items[:1], make_retailer(), SHOP
    )
    item = order.order.line_items[0]

    self.assertEqual(item.sku, "SOFA-1")
    self.assertEqual(item.name, "Sofa")
    self.assertEqual(item.retail_value, "1299.00")
    self.assertEqual(item.weight, 100.0)
    self.assertFalse(item.freight_info.is_fob)
    vendor = item.freight_info.vendor_info
    self.assertEqual(vendor.company, "Main Warehouse")
    self.assertEqual(vendor.address.state, "NJ")
    self.assertEqual(vendor.address.address2, "")
    self.assertEqual(vendor.phone, "973-555-0100")
    self.assertEqual(vendor.first_name, "")
    self.assertEqual(vendor.receiving_hours, "")

  def test_sku_falls_back_to_product_id_and_weight_to_zero(self) -> None:
    raw = _order()
    order = order_transformer.build_order(
        raw, raw.line_items[1:], make_retailer(delivery_type=1), SHOP
    )
    item = order.order.line_items[0]

    self.assertEqual(item.sku, "502")
    self.assertEqual(item.weight, 0)
    self.assertTrue(item.freight_info.is_fob)
    self.assertEqual(item.freight_info.vendor_info.phone, "")

  def test_raw_mirror_keeps_all_line_items(self) -> None:
    raw = _order()
    order = order_transformer.build_order(
        raw, raw.line_items[:1], make_retailer(), SHOP
    )
    mirror = order.order.payload.shopify_raw

    self.assertEqual(mirror.id, 1001)
    self.assertEqual([li.id for li in mirror.line_items], [11, 12])

  def test_customer_from_shipping_address(self) -> None:
    raw = _order()
    customer = order_transformer.build_order(
        raw, [], make_retailer(), SHOP
    ).order.customer

    self.assertEqual(customer.first_name, "Ada")
    self.assertEqual(customer.address.state, "NY")
    self.assertEqual(customer.phone1.number, "212-555-0101")
    self.assertEqual(customer.company, "")
    self.assertEqual(customer.email, "ada@example.com")

  def test_customer_address_fallbacks(self) -> None:
    raw = _order(
        shipping_address=None,
        customer_address={"address1": "2 Elm St", "city": "Albany"},
    )
    customer = order_transformer.build_order(
        raw, [], make_retailer(), SHOP
    ).order.customer
    self.assertEqual(customer.address.address1, "2 Elm St")
    self.assertEqual(customer.phone1.number, "212-555-0000")

    raw = _order(
        shipping_address=None,
        customer={"default_address": {"address1": "3 Oak St"}},
    )
    customer = order_transformer.build_order(
        raw, [], make_retailer(), SHOP
    ).order.customer
    self.assertEqual(customer.address.address1, "3 Oak St")
    self.assertEqual(customer.phone1.number, "")
    self.assertEqual(customer.email, "")

  def test_default_service_level(self) -> None:
    raw = _order(shipping_lines=[])
    order = order_transformer.build_order(raw, [], make_retailer(), SHOP)
    self.assertEqual(order.order.service_level, "STANDARD")

  def test_validation_warnings_do_not_block(self) -> None:
    raw = _order(shipping_address=None, customer=None)
    with self.assertLogs(order_transformer.logger, level="WARNING") as logs:
      order = order_transformer.build_order(raw, [], make_retailer(), SHOP)

    self.assertEmpty(order.order.line_items)
    output = "\n".join(logs.output)
    self.assertIn("customer.address is missing fields", output)
    self.assertIn("phone1.number is missing", output)
    self.assertIn("line_items is empty", output)

  def test_validate_order_flags_incomplete_vendor_address(self) -> None:
    raw = _order()
    order = order_transformer.build_order(
        raw, raw.line_items[1:], make_retailer(), SHOP
    )
    warnings = order_transformer.validate_order(order)
    self.assertIn(
        "line_items[0].freight_info.vendor_info.address is incomplete",
        warnings,
    )

  def test_pounds(self) -> None:
    self.assertEqual(order_transformer.pounds(453.592), 1.0)
    self.assertEqual(order_transformer.pounds(1000), 2.2)
    self.assertEqual(order_transformer.pounds(None), 0)


if __name__ == "__main__":
  absltest.main()
