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

"""Builds the delivery provider's order document from a Shopify order."""

import logging
from typing import List, Optional, Sequence

from models import Address
from models import DownstreamAddress
from models import DownstreamCustomer
from models import DownstreamLineItem
from models import DownstreamOrder
from models import DownstreamOrderBody
from models import FreightInfo
from models import GRAMS_PER_POUND
from models import LineItem
from models import OrderAuditPayload
from models import OrderPayload
from models import OriginLocation
from models import Phone
from models import RawLineItem
from models import RawOrderMirror
from models import Retailer
from models import RetailerRef
from models import VendorInfo

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_LEVEL = "STANDARD"

_CUSTOMER_ADDRESS_FIELDS = ("address1", "city", "state", "zip")
_VENDOR_ADDRESS_FIELDS = ("address1", "city", "state", "zip")


def pounds(grams) -> float:
  """Converts grams to pounds rounded to two places; 0 when unknown."""
  if not grams:
    return 0
  return round(grams / GRAMS_PER_POUND, 2)


def _line_item(item: LineItem, is_fob: bool) -> DownstreamLineItem:
  origin = item.origin_location or OriginLocation()
  if item.sku:
    sku = item.sku
  elif item.product_id is not None:
    sku = str(item.product_id)
  else:
    sku = None

  return DownstreamLineItem(
      sku=sku,
      name=item.title,
      quantity=item.quantity,
      retail_value=item.price,
      weight=pounds(item.grams),
      vendor=item.vendor,
      freight_info=FreightInfo(
          is_fob=is_fob,
          vendor_info=VendorInfo(
              address=DownstreamAddress(
                  address1=origin.address1,
                  address2=origin.address2 or "",
                  city=origin.city,
                  state=origin.province_code,
                  zip=origin.zip,
              ),
              company=origin.name,
              phone=origin.phone or "",
          ),
      ),
  )


def _customer_address(raw_order: OrderPayload) -> Address:
  if raw_order.shipping_address:
    return raw_order.shipping_address
  if raw_order.customer_address:
    return raw_order.customer_address
  if raw_order.customer and raw_order.customer.default_address:
    return raw_order.customer.default_address
  return Address()


def _customer(raw_order: OrderPayload) -> DownstreamCustomer:
  address = _customer_address(raw_order)
  customer = raw_order.customer
  customer_phone = customer.phone if customer else None
  return DownstreamCustomer(
      first_name=customer.first_name if customer else None,
      last_name=customer.last_name if customer else None,
      address=DownstreamAddress(
          address1=address.address1,
          address2=address.address2 or "",
          city=address.city,
          state=address.province_code,
          zip=address.zip,
      ),
      phone1=Phone(number=address.phone or customer_phone or ""),
      email=(customer.email if customer else None) or "",
  )


def _raw_mirror(raw_order: OrderPayload) -> RawOrderMirror:
  return RawOrderMirror(
      id=raw_order.id,
      name=raw_order.name or "",
      line_items=[
          RawLineItem(
              id=li.id,
              title=li.title,
              quantity=li.quantity,
              price=li.price,
              grams=li.grams,
              vendor=li.vendor,
              product_id=li.product_id,
          )
          for li in raw_order.line_items
      ],
  )


def validate_order(order: DownstreamOrder) -> List[str]:
  """Returns warnings for fields the provider will likely need.

  The order is submitted regardless; the warnings only help diagnose
  rejected or misrouted deliveries.
  """
  body = order.order
  warnings = []

  missing = [
      field
      for field in _CUSTOMER_ADDRESS_FIELDS
      if not getattr(body.customer.address, field)
  ]
  if missing:
    warnings.append(f"customer.address is missing fields: {missing}")
  if not body.customer.phone1.number:
    warnings.append("customer.phone1.number is missing")

  if not body.line_items:
    warnings.append("line_items is empty")
  for index, item in enumerate(body.line_items):
    vendor = item.freight_info.vendor_info
    if not vendor.phone or not all(
        getattr(vendor.address, field) for field in _VENDOR_ADDRESS_FIELDS
    ):
      warnings.append(
          f"line_items[{index}].freight_info.vendor_info.address is"
          " incomplete"
      )

  raw = body.payload.shopify_raw
  missing = [
      field for field in ("id", "name") if not getattr(raw, field)
  ]
  if missing:
    warnings.append(f"payload.shopify_raw is missing fields: {missing}")
  return warnings


def build_order(
    raw_order: OrderPayload,
    line_items: Sequence[LineItem],
    retailer: Retailer,
    shop: str,
    service_level: Optional[str] = None,
) -> DownstreamOrder:
  """Assembles the provider order document.

  Args:
    raw_order: The parsed webhook body. Supplies the customer, the order
      numbers and the unfiltered raw line items.
    line_items: The eligible line items with resolved origins.
    retailer: The shop's store record.
    shop: The shop domain, used as the retailer identifier.
    service_level: The chosen service level; defaults to the first shipping
      line code.

  Returns:
    The order envelope ready for submission.
  """
  is_fob = retailer.settings.is_last_mile_only
  body = DownstreamOrderBody(
      sales_order_number=raw_order.name or "",
      ref_order_number="" if raw_order.id is None else str(raw_order.id),
      payload=OrderAuditPayload(
          shopify_order_number=raw_order.order_number,
          shopify_raw=_raw_mirror(raw_order),
      ),
      customer=_customer(raw_order),
      line_items=[_line_item(item, is_fob) for item in line_items],
      retailer=RetailerRef(identifier=shop),
      service_level=(
          service_level or raw_order.service_code or DEFAULT_SERVICE_LEVEL
      ),
  )
  order = DownstreamOrder(order=body)

  for warning in validate_order(order):
    logger.warning("Order %s: %s", body.ref_order_number, warning)
  return order
