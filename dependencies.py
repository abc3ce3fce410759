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

"""FastAPI dependencies for the routing adapter.

This module contains dependency injection logic for FastAPI endpoints,
including:
- Webhook header extraction and HMAC signature verification.
- Client construction (delivery provider, per-shop platform clients).
- Service instantiation (FulfillmentService, RateService).

Tests replace any of these through `app.dependency_overrides`.
"""

import base64
import hashlib
import hmac
import logging
from typing import Optional

from clients.deliveright_client import DeliverightClient
from clients.shopify_client import ShopifyClient
import config
from config import AdapterConfig
import db
from exceptions import LedgerError
from exceptions import WebhookVerificationError
from fastapi import Depends
from fastapi import Header
from fastapi import Request
from pydantic import BaseModel
from services.fulfillment_service import FulfillmentService
from services.fulfillment_service import PlatformFactory
from services.ledger_service import IdempotencyLedger
from services.rate_service import RateService

logger = logging.getLogger(__name__)


class WebhookHeaders(BaseModel):
  """Headers Shopify sends with every webhook delivery."""

  topic: str
  shop_domain: str
  webhook_id: Optional[str] = None
  hmac_sha256: Optional[str] = None


async def webhook_headers(
    x_shopify_topic: str = Header(...),
    x_shopify_shop_domain: str = Header(...),
    x_shopify_webhook_id: Optional[str] = Header(None),
    x_shopify_hmac_sha256: Optional[str] = Header(None),
) -> WebhookHeaders:
  """Extracts the Shopify webhook headers."""
  return WebhookHeaders(
      topic=x_shopify_topic,
      shop_domain=x_shopify_shop_domain,
      webhook_id=x_shopify_webhook_id,
      hmac_sha256=x_shopify_hmac_sha256,
  )


def get_adapter_config() -> AdapterConfig:
  """Dependency provider for the process configuration."""
  return config.get_adapter_config()


def compute_webhook_hmac(secret: str, body: bytes) -> str:
  """Returns the base64 HMAC-SHA256 digest Shopify sends for a body."""
  digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
  return base64.b64encode(digest).decode("ascii")


async def verify_webhook(
    request: Request,
    headers: WebhookHeaders = Depends(webhook_headers),
    cfg: AdapterConfig = Depends(get_adapter_config),
) -> WebhookHeaders:
  """Verifies the webhook HMAC against the raw request body.

  Verification is skipped when no API secret is configured, which is only
  meant for local development.

  Raises:
    WebhookVerificationError: The signature is missing or does not match.
  """
  if not cfg.shopify_api_secret:
    logger.warning(
        "SHOPIFY_API_SECRET is not set, skipping webhook verification"
    )
    return headers

  if not headers.hmac_sha256:
    raise WebhookVerificationError("Missing X-Shopify-Hmac-Sha256 header")

  body = await request.body()
  expected = compute_webhook_hmac(cfg.shopify_api_secret, body)
  if not hmac.compare_digest(expected, headers.hmac_sha256):
    raise WebhookVerificationError(
        f"Invalid webhook signature from {headers.shop_domain}"
    )
  return headers


def get_provider_client(
    cfg: AdapterConfig = Depends(get_adapter_config),
) -> DeliverightClient:
  """Dependency provider for the delivery provider client."""
  return DeliverightClient(
      cfg.deliveright_host,
      cfg.deliveright_client_id,
      cfg.deliveright_client_secret,
      timeout=cfg.request_timeout,
  )


def get_platform_factory(
    cfg: AdapterConfig = Depends(get_adapter_config),
) -> PlatformFactory:
  """Dependency provider for per-shop platform clients."""

  def factory(shop: str, access_token: Optional[str]) -> ShopifyClient:
    return ShopifyClient(
        shop,
        access_token,
        cfg.shopify_api_version,
        timeout=cfg.request_timeout,
    )

  return factory


def get_ledger() -> IdempotencyLedger:
  """Dependency provider for the idempotency ledger."""
  if db.manager.session_factory is None:
    raise LedgerError("Ledger database is not initialized")
  return IdempotencyLedger(db.manager.session_factory)


def get_fulfillment_service(
    cfg: AdapterConfig = Depends(get_adapter_config),
    provider: DeliverightClient = Depends(get_provider_client),
    ledger: IdempotencyLedger = Depends(get_ledger),
    platform_factory: PlatformFactory = Depends(get_platform_factory),
) -> FulfillmentService:
  """Dependency provider for FulfillmentService."""
  return FulfillmentService(cfg, provider, ledger, platform_factory)


def get_rate_service(
    cfg: AdapterConfig = Depends(get_adapter_config),
    provider: DeliverightClient = Depends(get_provider_client),
    platform_factory: PlatformFactory = Depends(get_platform_factory),
) -> RateService:
  """Dependency provider for RateService."""
  return RateService(cfg, provider, platform_factory)
