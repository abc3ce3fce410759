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

"""Shopify to Deliveright order routing adapter (Python/FastAPI)."""

import logging
import sys
from typing import Sequence
from absl import app as absl_app
import config
from exceptions import AdapterError
from fastapi import FastAPI
from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.responses import PlainTextResponse
from routes.carrier import router as carrier_router
from routes.webhooks import router as webhooks_router
import uvicorn

# --- App Setup ---

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Deliveright Routing Adapter",
    version="1.0.0",
    description=(
        "Routes fulfilled Shopify orders to Deliveright and quotes"
        " white-glove delivery rates at checkout"
    ),
    lifespan=config.lifespan,
)


@app.exception_handler(AdapterError)
async def adapter_exception_handler(request: Request, exc: AdapterError):
  """Handles adapter exceptions and converts them to JSON responses."""
  del request  # Unused.
  return JSONResponse(
      status_code=exc.status_code,
      content={"detail": exc.message, "code": exc.code},
  )


@app.get("/health", response_class=PlainTextResponse)
async def health() -> str:
  return "ok"


app.include_router(webhooks_router)
app.include_router(carrier_router)


def main(argv: Sequence[str]) -> None:
  """Main entry point for the routing adapter."""
  del argv  # Unused.

  if config.FLAGS.port is None:
    logger.error("--port must be provided.")
    print("\nUsage:")
    print(config.FLAGS.main_module_help())
    sys.exit(1)

  cfg = config.get_adapter_config()
  if not cfg.deliveright_host:
    logger.warning("DELIVERIGHT_HOST is not set; provider calls will fail")

  uvicorn.run(app, host="0.0.0.0", port=config.FLAGS.port)


def run() -> None:
  absl_app.run(main)


if __name__ == "__main__":
  run()
