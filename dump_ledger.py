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

"""Utility script to dump the processed-orders ledger.

Lists every (shop, order) pair that was claimed for submission to the
delivery provider, oldest first. Useful when a merchant asks whether an order
reached Deliveright.

Usage:
  uv run dump_ledger.py --ledger_db_path=... [--shop=example.myshopify.com]
"""

import asyncio
import json
import os
import sys
from absl import app as absl_app
from absl import flags
import config
import db

FLAGS = flags.FLAGS
flags.DEFINE_string("shop", None, "Only list orders for this shop domain")
flags.DEFINE_bool("json", False, "Print one JSON object per line")


async def dump_ledger():
  """Queries the ledger and prints processed orders."""
  ledger_path = config.get_ledger_db_path()
  if not os.path.exists(ledger_path):
    print(f"Error: ledger DB {ledger_path} does not exist.")
    sys.exit(1)

  manager = db.DatabaseManager()
  await manager.init_db(ledger_path)
  try:
    async with manager.session_factory() as session:
      orders = await db.list_processed_orders(session, FLAGS.shop)
  finally:
    await manager.close()

  if not FLAGS.json:
    print("=== PROCESSED ORDERS ===")
  if not orders:
    print("No processed orders found.")
    return

  for order in orders:
    if FLAGS.json:
      print(
          json.dumps({
              "shop": order.shop,
              "order_id": order.order_id,
              "created_at": order.created_at,
          })
      )
    else:
      print(f"[{order.created_at}] {order.shop} order {order.order_id}")


def main(argv):
  """Main entry point for the ledger dump script."""
  del argv
  asyncio.run(dump_ledger())


def run() -> None:
  absl_app.run(main)


if __name__ == "__main__":
  run()
