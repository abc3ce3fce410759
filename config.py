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

"""Shared configuration and startup logic for the routing adapter.

Process options come from absl flags; hosts and credentials come from the
environment (a `.env` file is honoured). Both are folded into a single frozen
`AdapterConfig` that is passed explicitly to the clients and services.
"""

import contextlib
import json
import logging
import os
from typing import Dict, FrozenSet, Mapping, Optional, Tuple

from absl import flags
import db
from dotenv import load_dotenv
from fastapi import FastAPI
from models import ServiceLevel
from pydantic import BaseModel
from pydantic import ConfigDict

logger = logging.getLogger(__name__)

FLAGS = flags.FLAGS

DEFAULT_SERVICE_LEVELS_PATH = os.path.join(
    os.path.dirname(os.path.abspath(__file__)), "data", "service_levels.json"
)
DEFAULT_LEDGER_DB_PATH = "database.sqlite"
DEFAULT_SHOPIFY_API_VERSION = "2024-10"

_CONFIG_CACHE = None

# Define flags only if they haven't been defined yet (to avoid duplicates
# during tests or re-imports)
try:
  flags.DEFINE_string(
      "ledger_db_path",
      DEFAULT_LEDGER_DB_PATH,
      "Path to the processed-orders ledger DB",
  )
  flags.DEFINE_string(
      "service_levels_path",
      DEFAULT_SERVICE_LEVELS_PATH,
      "JSON file with the service-level catalog and per-shop overrides",
  )
  flags.DEFINE_integer("port", None, "Port to run the server on")
except flags.DuplicateFlagError:
  pass


class AdapterConfig(BaseModel):
  """Immutable runtime configuration."""

  model_config = ConfigDict(frozen=True)

  deliveright_host: str = ""
  deliveright_client_id: str = ""
  deliveright_client_secret: str = ""
  shopify_api_secret: Optional[str] = None
  shopify_api_version: str = DEFAULT_SHOPIFY_API_VERSION
  # Seconds; applies to every outbound call.
  request_timeout: float = 10.0
  # Seconds; budget for a whole checkout quote.
  quote_timeout: float = 8.0
  location_lookup_limit: int = 10
  service_levels: Tuple[ServiceLevel, ...] = ()
  rate_overrides: Dict[str, Dict[str, Dict[str, str]]] = {}

  @property
  def service_codes(self) -> FrozenSet[str]:
    return frozenset(level.service_code for level in self.service_levels)

  def service_level(self, code: Optional[str]) -> Optional[ServiceLevel]:
    """Returns the catalog entry for a service code, None if unknown."""
    for level in self.service_levels:
      if level.service_code == code:
        return level
    return None


def _read_catalog(path: str) -> Tuple[Tuple[ServiceLevel, ...], dict]:
  with open(path, "r", encoding="utf-8") as f:
    data = json.load(f)
  levels = tuple(
      ServiceLevel.model_validate(entry)
      for entry in data.get("service_levels", [])
  )
  return levels, data.get("rate_overrides", {})


def load_config(
    service_levels_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AdapterConfig:
  """Builds an AdapterConfig from the environment and the catalog file."""
  if environ is None:
    load_dotenv()
    environ = os.environ

  levels, overrides = _read_catalog(
      service_levels_path or DEFAULT_SERVICE_LEVELS_PATH
  )
  logger.info("Loaded %d service levels", len(levels))

  return AdapterConfig(
      deliveright_host=environ.get("DELIVERIGHT_HOST", "").rstrip("/"),
      deliveright_client_id=environ.get("DELIVERIGHT_ID", ""),
      deliveright_client_secret=environ.get("DELIVERIGHT_SECRET", ""),
      shopify_api_secret=environ.get("SHOPIFY_API_SECRET") or None,
      shopify_api_version=environ.get(
          "SHOPIFY_API_VERSION", DEFAULT_SHOPIFY_API_VERSION
      ),
      request_timeout=float(environ.get("REQUEST_TIMEOUT_SECONDS", 10)),
      quote_timeout=float(environ.get("QUOTE_TIMEOUT_SECONDS", 8)),
      service_levels=levels,
      rate_overrides=overrides,
  )


def get_adapter_config() -> AdapterConfig:
  """Loads and caches the process-wide configuration."""
  global _CONFIG_CACHE
  if _CONFIG_CACHE:
    return _CONFIG_CACHE

  path = (
      FLAGS.service_levels_path
      if FLAGS.is_parsed()
      else DEFAULT_SERVICE_LEVELS_PATH
  )
  _CONFIG_CACHE = load_config(path)
  return _CONFIG_CACHE


def get_ledger_db_path() -> str:
  if FLAGS.is_parsed():
    return FLAGS.ledger_db_path
  return os.environ.get("LEDGER_DB_PATH", DEFAULT_LEDGER_DB_PATH)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
  """Shared lifespan manager for initializing the ledger database."""
  del app  # Unused.
  await db.manager.init_db(get_ledger_db_path())
  yield
  await db.manager.close()
