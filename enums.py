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

"""Enumerations for the delivery routing adapter.

This module defines the retailer setting codes shared with the delivery
provider and the states an inbound fulfillment event moves through.
"""

import enum
from typing import Any, Optional


class DeliveryType(enum.IntEnum):
  LAST_MILE_ONLY = 1
  FULL_SERVICE = 2


class PaymentStrategy(enum.IntEnum):
  """Who pays for delivery, as configured in the retailer settings."""

  PAID_BY_CUSTOMER = 0
  PAID_BY_SHIPPER = 1
  SPLIT = 2
  FIXED = 3
  ROUND_NEAREST_NUMBER = 4

  @classmethod
  def parse(cls, value: Any) -> Optional["PaymentStrategy"]:
    """Returns the strategy for a numeric code or name, None if unknown."""
    if isinstance(value, cls):
      return value
    if isinstance(value, str) and value in cls.__members__:
      return cls[value]
    try:
      return cls(int(value))
    except (TypeError, ValueError):
      return None


class EventState(str, enum.Enum):
  RECEIVED = "received"
  CLASSIFIED = "classified"
  REJECTED = "rejected"
  ELIGIBLE = "eligible"
  ORIGIN_RESOLVED = "origin_resolved"
  FILTERED = "filtered"
  DUPLICATE = "duplicate"
  DEDUPED = "deduped"
  TRANSFORMED = "transformed"
  SUBMITTED = "submitted"
  FAILED = "failed"


TERMINAL_STATES = frozenset({
    EventState.REJECTED,
    EventState.DUPLICATE,
    EventState.SUBMITTED,
    EventState.FAILED,
})


class ResolutionStatus(str, enum.Enum):
  COMPLETE = "complete"
  PARTIAL = "partial"
  UNRESOLVED = "unresolved"


class OriginSource(str, enum.Enum):
  """Which tier of the fallback chain produced an origin location."""

  LINE_ITEM = "line_item"
  FULFILLMENT_LOCATION = "fulfillment_location"
  REGISTERED_LOCATION = "registered_location"
  NONE = "none"
