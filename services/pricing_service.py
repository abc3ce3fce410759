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

"""Customer-facing delivery price calculation.

A provider rate result is priced in three steps:
1. `sum_accessorials`: base cost plus every accessorial fee.
2. `compute_price`: the retailer's payment strategy decides how much of that
   the customer pays.
3. `format_price`: the optional price ceiling is applied and the value is
   scaled by 100 for the checkout.
"""

import logging
from typing import Any, Mapping, Optional, Union

from enums import PaymentStrategy
from models import RetailerSettings

logger = logging.getLogger(__name__)

Number = Union[int, float]

# ROUND_NEAREST_NUMBER only considers values less than this far above the
# price.
ROUND_NEAREST_WINDOW = 100000


def sum_accessorials(rate_result: Mapping[str, Any]) -> Number:
  """Returns the rate's base cost plus all accessorial fee costs.

  `accessorial_fees` may be a mapping of fee name to fee or a list of fees.
  Fees without a cost count as zero.
  """
  fees = rate_result.get("accessorial_fees") or {}
  if isinstance(fees, Mapping):
    fees = fees.values()
  return rate_result.get("cost", 0) + sum(
      (fee or {}).get("cost") or 0 for fee in fees
  )


def _round_up_to_configured(price: Number, values) -> Number:
  best = None
  diff = ROUND_NEAREST_WINDOW
  for value in values:
    if value > price and value - price < diff:
      best = value
      diff = value - price
  return price if best is None else best


def compute_price(
    price: Number, settings: RetailerSettings
) -> Optional[Number]:
  """Applies the retailer's payment strategy to a raw delivery cost.

  Args:
    price: The summed delivery cost.
    settings: The retailer settings holding the payment block.

  Returns:
    The customer's share, or None when the strategy is not recognized.
  """
  payment = settings.payment
  strategy = PaymentStrategy.parse(payment.type)

  if strategy == PaymentStrategy.PAID_BY_CUSTOMER:
    return price
  if strategy == PaymentStrategy.PAID_BY_SHIPPER:
    return 0
  if strategy == PaymentStrategy.SPLIT:
    # split_ratio is the merchant's share; the customer pays the rest.
    return price / 100 * (100 - payment.split_ratio)
  if strategy == PaymentStrategy.FIXED:
    # Negative when the fixed amount exceeds the cost.
    return price - payment.fixed * 100
  if strategy == PaymentStrategy.ROUND_NEAREST_NUMBER:
    return _round_up_to_configured(price, payment.round_nearest)

  logger.warning("Unknown payment strategy %r", payment.type)
  return None


def format_price(price: Number, settings: RetailerSettings) -> Number:
  """Caps the price at the configured ceiling and scales it by 100."""
  limit = settings.payment.limit
  if limit.active and limit.amount:
    price = min(price, limit.amount)
  # The strategy output is already in cents; the extra factor of 100 is what
  # the checkout has always received.
  return price * 100


def quote_price(
    rate_result: Mapping[str, Any], settings: RetailerSettings
) -> Optional[Number]:
  """Runs the full pricing pipeline; None means the price is unknown."""
  price = compute_price(sum_accessorials(rate_result), settings)
  if price is None:
    return None
  return format_price(price, settings)
