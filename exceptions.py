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

"""Custom exceptions for the delivery routing adapter."""

from typing import Any, Optional


class AdapterError(Exception):
  """Base class for all adapter exceptions."""

  def __init__(
      self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500
  ):
    self.message = message
    self.code = code
    self.status_code = status_code
    super().__init__(self.message)


class InvalidRequestError(AdapterError):
  """Raised when the request is invalid (e.g. malformed body)."""

  def __init__(self, message: str):
    super().__init__(message, code="INVALID_REQUEST", status_code=400)


class WebhookVerificationError(AdapterError):
  """Raised when a webhook HMAC signature does not match its body."""

  def __init__(self, message: str):
    super().__init__(
        message, code="WEBHOOK_VERIFICATION_FAILED", status_code=401
    )


class RetailerNotFoundError(AdapterError):
  """Raised when the delivery provider has no store for a shop."""

  def __init__(self, message: str):
    super().__init__(message, code="RETAILER_NOT_FOUND", status_code=404)


class PlatformQueryError(AdapterError):
  """Raised when a platform Admin API query fails or times out."""

  def __init__(self, message: str):
    super().__init__(message, code="PLATFORM_QUERY_FAILED", status_code=502)


class ProviderError(AdapterError):
  """Raised when a delivery provider call fails or times out."""

  def __init__(
      self,
      message: str,
      response_status: Optional[int] = None,
      response_body: Any = None,
  ):
    self.response_status = response_status
    self.response_body = response_body
    super().__init__(message, code="PROVIDER_REQUEST_FAILED", status_code=502)


class RateCalculationError(AdapterError):
  """Raised when a delivery rate cannot be priced for a service level."""

  def __init__(self, message: str):
    super().__init__(message, code="RATE_CALCULATION_FAILED", status_code=422)


class LedgerError(AdapterError):
  """Raised when the processed-orders ledger cannot be read or written.

  The outcome of the claim is unknown, so callers must not submit the order.
  The platform redelivers the event later.
  """

  def __init__(self, message: str):
    super().__init__(message, code="LEDGER_UNAVAILABLE", status_code=503)
