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

"""Pydantic models for the delivery routing adapter.

Three families of models live here:
- Platform payloads: the Shopify order webhook body and the carrier-service
  rate request. They allow extra fields so the raw payload survives parsing.
- Retailer records: the store settings the delivery provider keeps for each
  shop, including the payment strategy and price ceiling.
- Downstream documents: the order envelope submitted to the delivery
  provider.
"""

from typing import Any, List, Optional, Union

from enums import DeliveryType
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator
from pydantic import ValidationInfo

GRAMS_PER_POUND = 453.592

Identifier = Union[int, str]
Number = Union[int, float]


class PlatformModel(BaseModel):
  """Base for platform payload models; unknown fields are preserved."""

  model_config = ConfigDict(extra="allow")


# --- Platform payloads ---


class OriginLocation(PlatformModel):
  """Ship-from address of a line item."""

  address1: Optional[str] = None
  address2: Optional[str] = None
  city: Optional[str] = None
  province_code: Optional[str] = None
  zip: Optional[str] = None
  name: Optional[str] = None
  phone: Optional[str] = None

  def is_complete(self) -> bool:
    """True when every field the provider needs is present."""
    return bool(self.has_address() and self.name)

  def has_address(self) -> bool:
    """True when the address fields and phone are present; name may be empty."""
    return bool(
        self.address1
        and self.city
        and self.province_code
        and self.zip
        and self.phone
    )


class Address(PlatformModel):
  first_name: Optional[str] = None
  last_name: Optional[str] = None
  company: Optional[str] = None
  address1: Optional[str] = None
  address2: Optional[str] = None
  city: Optional[str] = None
  province_code: Optional[str] = None
  zip: Optional[str] = None
  country_code: Optional[str] = None
  phone: Optional[str] = None


class Customer(PlatformModel):
  id: Optional[Identifier] = None
  first_name: Optional[str] = None
  last_name: Optional[str] = None
  email: Optional[str] = None
  phone: Optional[str] = None
  default_address: Optional[Address] = None


class LineItem(PlatformModel):
  id: Optional[Identifier] = None
  sku: Optional[str] = None
  title: Optional[str] = None
  quantity: int = 0
  price: Optional[Union[str, Number]] = None
  grams: Optional[Number] = None
  vendor: Optional[str] = None
  product_id: Optional[int] = None
  variant_id: Optional[int] = None
  origin_location: Optional[OriginLocation] = None
  tags: List[str] = Field(default_factory=list)


class FulfillmentLineItem(PlatformModel):
  id: Optional[Identifier] = None


class Fulfillment(PlatformModel):
  id: Optional[Identifier] = None
  status: Optional[str] = None
  location_id: Optional[Identifier] = None
  line_items: List[FulfillmentLineItem] = Field(default_factory=list)

  def contains(self, line_item_id: Optional[Identifier]) -> bool:
    return line_item_id is not None and any(
        li.id == line_item_id for li in self.line_items
    )


class ShippingLine(PlatformModel):
  code: Optional[str] = None
  title: Optional[str] = None


class OrderPayload(PlatformModel):
  """Body of an `orders/fulfilled` webhook."""

  id: Optional[Identifier] = None
  name: Optional[str] = None
  order_number: Optional[Identifier] = None
  email: Optional[str] = None
  customer: Optional[Customer] = None
  shipping_address: Optional[Address] = None
  customer_address: Optional[Address] = None
  line_items: List[LineItem] = Field(default_factory=list)
  fulfillments: List[Fulfillment] = Field(default_factory=list)
  shipping_lines: List[ShippingLine] = Field(default_factory=list)

  @property
  def service_code(self) -> Optional[str]:
    """The customer's chosen shipping method code, if any."""
    if not self.shipping_lines:
      return None
    return self.shipping_lines[0].code


class RateAddress(PlatformModel):
  country: Optional[str] = None
  postal_code: Optional[str] = None
  province: Optional[str] = None
  city: Optional[str] = None
  address1: Optional[str] = None


class RateItem(PlatformModel):
  name: Optional[str] = None
  sku: Optional[str] = None
  quantity: int = 0
  grams: Number = 0
  price: Optional[Number] = None
  vendor: Optional[str] = None
  product_id: Optional[int] = None
  variant_id: Optional[int] = None
  tags: List[str] = Field(default_factory=list)


class RateRequest(PlatformModel):
  origin: RateAddress = Field(default_factory=RateAddress)
  destination: RateAddress = Field(default_factory=RateAddress)
  items: List[RateItem] = Field(default_factory=list)
  currency: Optional[str] = None


class CarrierRateRequest(PlatformModel):
  """Body of a carrier-service callback."""

  rate: RateRequest


class ServiceLevel(BaseModel):
  """Catalog entry for a delivery tier; total_price is set per quote."""

  service_name: str
  service_code: str
  description: str = ""
  currency: str = "USD"
  total_price: Optional[Number] = None


class RatesResponse(BaseModel):
  rates: List[ServiceLevel] = Field(default_factory=list)


# --- Retailer records ---


class SettingsModel(PlatformModel):
  """Base for retailer settings; an explicit null means "use the default".

  Store records leave settings their payment strategy does not use as null.
  """

  @field_validator("*", mode="before")
  @classmethod
  def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
    if value is None:
      return cls.model_fields[info.field_name].get_default(
          call_default_factory=True
      )
    return value


class PriceLimit(SettingsModel):
  active: bool = False
  amount: Optional[Number] = None


class PaymentSettings(SettingsModel):
  type: Optional[Union[int, str]] = None
  split_ratio: Number = 0
  fixed: Number = 0
  round_nearest: List[Number] = Field(default_factory=list)
  limit: PriceLimit = Field(default_factory=PriceLimit)


class AuthSettings(SettingsModel):
  access_token: Optional[str] = None


class RetailerSettings(SettingsModel):
  delivery_type: Optional[int] = None
  payment: PaymentSettings = Field(default_factory=PaymentSettings)
  auth: AuthSettings = Field(default_factory=AuthSettings)

  @property
  def is_last_mile_only(self) -> bool:
    return self.delivery_type == DeliveryType.LAST_MILE_ONLY


class Retailer(BaseModel):
  """A shop's store record as kept by the delivery provider."""

  identifier: str
  name: str = ""
  first_name: Optional[str] = None
  last_name: Optional[str] = None
  company: Optional[str] = None
  email: Optional[str] = None
  address: Optional[dict] = None
  pricing_type: Optional[Union[int, str]] = None
  settings: RetailerSettings = Field(default_factory=RetailerSettings)


# --- Downstream documents ---


class DownstreamAddress(BaseModel):
  address1: Optional[str] = None
  address2: str = ""
  city: Optional[str] = None
  state: Optional[str] = None
  zip: Optional[str] = None


class VendorInfo(BaseModel):
  first_name: str = ""
  last_name: str = ""
  address: DownstreamAddress
  company: Optional[str] = None
  phone: str = ""
  email: str = ""
  receiving_hours: str = ""


class FreightInfo(BaseModel):
  is_fob: bool
  vendor_info: VendorInfo


class DownstreamLineItem(BaseModel):
  sku: Optional[str] = None
  name: Optional[str] = None
  quantity: int = 0
  retail_value: Optional[Union[str, Number]] = None
  weight: Number = 0
  vendor: Optional[str] = None
  freight_info: FreightInfo


class Phone(BaseModel):
  number: str = ""


class DownstreamCustomer(BaseModel):
  first_name: Optional[str] = None
  last_name: Optional[str] = None
  address: DownstreamAddress
  company: str = ""
  phone1: Phone
  email: str = ""


class RawLineItem(BaseModel):
  id: Optional[Identifier] = None
  title: Optional[str] = None
  quantity: Optional[int] = None
  price: Optional[Union[str, Number]] = None
  grams: Optional[Number] = None
  vendor: Optional[str] = None
  product_id: Optional[int] = None


class RawOrderMirror(BaseModel):
  id: Optional[Identifier] = None
  name: str = ""
  line_items: List[RawLineItem] = Field(default_factory=list)


class OrderAuditPayload(BaseModel):
  shopify_order_number: Optional[Identifier] = None
  shopify_raw: RawOrderMirror


class RetailerRef(BaseModel):
  identifier: str


class DownstreamOrderBody(BaseModel):
  source: str = "shopify"
  sales_order_number: str = ""
  ref_order_number: str = ""
  payload: OrderAuditPayload
  customer: DownstreamCustomer
  line_items: List[DownstreamLineItem] = Field(default_factory=list)
  retailer: RetailerRef
  service_level: str = "STANDARD"
  send_retailer_confirmation: bool = False
  note: str = ""
  label_recipients: List[str] = Field(default_factory=list)


class SubmissionOptions(BaseModel):
  send_retailer_confirmation: bool = True
  send_labels_to_manufacturer: bool = True


class DownstreamOrder(BaseModel):
  """Order envelope posted to the delivery provider."""

  order: DownstreamOrderBody
  options: SubmissionOptions = Field(default_factory=SubmissionOptions)
