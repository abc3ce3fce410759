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

"""Read-only Shopify Admin GraphQL client bound to one shop.

Only the three lookups the adapter needs are exposed: a location by ID, the
shop's first registered locations, and product tags by product ID.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from exceptions import PlatformQueryError
import httpx

logger = logging.getLogger(__name__)

LOCATION_QUERY = """
query GetLocation($id: ID!) {
  location(id: $id) {
    id
    name
    address {
      address1
      address2
      city
      provinceCode
      zip
      phone
    }
  }
}
"""

LOCATIONS_QUERY = """
query GetLocations($first: Int!) {
  locations(first: $first) {
    edges {
      node {
        id
        name
        address {
          address1
          address2
          city
          provinceCode
          zip
          phone
        }
      }
    }
  }
}
"""

PRODUCT_TAGS_QUERY = """
query getProducts($ids: [ID!]!) {
  nodes(ids: $ids) {
    ... on Product {
      id
      tags
    }
  }
}
"""

_PRODUCT_GID = re.compile(r"Product/(\d+)")


def location_gid(location_id: Any) -> str:
  return f"gid://shopify/Location/{location_id}"


def product_gid(product_id: Any) -> str:
  return f"gid://shopify/Product/{product_id}"


def product_id_from_gid(gid: str) -> Optional[int]:
  match = _PRODUCT_GID.search(gid or "")
  return int(match.group(1)) if match else None


class ShopifyClient:
  """Shopify Admin API client for a single shop and access token."""

  def __init__(
      self,
      shop: str,
      access_token: Optional[str],
      api_version: str,
      timeout: float = 10.0,
      transport: Optional[httpx.AsyncBaseTransport] = None,
  ):
    self.shop = shop
    self.access_token = access_token
    self.api_version = api_version
    self.timeout = timeout
    self._transport = transport

  @property
  def graphql_url(self) -> str:
    return f"https://{self.shop}/admin/api/{self.api_version}/graphql.json"

  async def _query(
      self, query: str, variables: Optional[Dict[str, Any]] = None
  ) -> Dict[str, Any]:
    """Runs a GraphQL query and returns its `data` object."""
    headers = {
        "Content-Type": "application/json",
        "X-Shopify-Access-Token": self.access_token or "",
    }
    try:
      async with httpx.AsyncClient(
          timeout=self.timeout, transport=self._transport
      ) as client:
        response = await client.post(
            self.graphql_url,
            json={"query": query, "variables": variables or {}},
            headers=headers,
        )
    except httpx.HTTPError as e:
      raise PlatformQueryError(
          f"Shopify request to {self.shop} failed: {e!r}"
      ) from e

    if response.status_code != 200:
      raise PlatformQueryError(
          f"Shopify returned {response.status_code} for {self.shop}:"
          f" {response.text}"
      )

    try:
      body = response.json()
    except ValueError as e:
      raise PlatformQueryError(
          f"Shopify returned invalid JSON for {self.shop}"
      ) from e

    if body.get("errors"):
      raise PlatformQueryError(
          f"Shopify GraphQL errors for {self.shop}: {body['errors']}"
      )
    return body.get("data") or {}

  async def get_location(self, location_id: Any) -> Optional[Dict[str, Any]]:
    """Fetches one location with its address, None if it does not exist."""
    data = await self._query(
        LOCATION_QUERY, {"id": location_gid(location_id)}
    )
    return data.get("location")

  async def list_locations(self, first: int = 10) -> List[Dict[str, Any]]:
    """Fetches the shop's first registered locations."""
    data = await self._query(LOCATIONS_QUERY, {"first": first})
    edges = (data.get("locations") or {}).get("edges") or []
    return [edge["node"] for edge in edges if edge.get("node")]

  async def get_product_tags(
      self, product_ids: Iterable[Any]
  ) -> Dict[int, List[str]]:
    """Fetches tags for products in one batch.

    Args:
      product_ids: Numeric product IDs.

    Returns:
      Tags keyed by numeric product ID. Products that were not found are
      absent from the result.
    """
    ids = [product_gid(pid) for pid in product_ids]
    if not ids:
      return {}
    data = await self._query(PRODUCT_TAGS_QUERY, {"ids": ids})

    tags_by_product = {}
    for node in data.get("nodes") or []:
      if not node or "id" not in node:
        continue
      product_id = product_id_from_gid(node["id"])
      if product_id is not None:
        tags_by_product[product_id] = list(node.get("tags") or [])
    return tags_by_product
