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

"""Tests for the processed-orders ledger."""

import asyncio
import os
import shutil
import tempfile

from absl.testing import absltest
import db
from exceptions import LedgerError
from services.ledger_service import IdempotencyLedger
from sqlalchemy.exc import OperationalError


class _BrokenSession:

  async def __aenter__(self):
    return self

  async def __aexit__(self, *args):
    return False

  async def execute(self, stmt):
    del stmt  # Unused.
    raise OperationalError("INSERT", {}, Exception("database is locked"))


class LedgerTest(absltest.TestCase):

  def setUp(self) -> None:
    super().setUp()
    self.test_dir = tempfile.mkdtemp()
    self.manager = db.DatabaseManager()
    asyncio.run(
        self.manager.init_db(os.path.join(self.test_dir, "ledger.db"))
    )
    self.ledger = IdempotencyLedger(self.manager.session_factory)

  def tearDown(self) -> None:
    asyncio.run(self.manager.close())
    shutil.rmtree(self.test_dir)
    super().tearDown()

  def test_first_claim_wins(self) -> None:
    async def run():
      first = await self.ledger.mark_if_new("a.myshopify.com", 1001)
      second = await self.ledger.mark_if_new("a.myshopify.com", 1001)
      third = await self.ledger.mark_if_new("a.myshopify.com", "1001")
      return first, second, third

    self.assertEqual(asyncio.run(run()), (True, False, False))

  def test_keys_are_per_shop(self) -> None:
    async def run():
      return [
          await self.ledger.mark_if_new("a.myshopify.com", 1001),
          await self.ledger.mark_if_new("b.myshopify.com", 1001),
          await self.ledger.mark_if_new("a.myshopify.com", 1002),
      ]

    self.assertEqual(asyncio.run(run()), [True, True, True])

  def test_concurrent_claims_have_one_winner(self) -> None:
    async def run():
      return await asyncio.gather(
          *(self.ledger.mark_if_new("a.myshopify.com", 42) for _ in range(8))
      )

    results = asyncio.run(run())
    self.assertEqual(results.count(True), 1)
    self.assertEqual(results.count(False), 7)

  def test_claim_is_persisted(self) -> None:
    async def run():
      await self.ledger.mark_if_new("a.myshopify.com", 7)
      async with self.manager.session_factory() as session:
        row = await db.get_processed_order(session, "a.myshopify.com", "7")
        rows = await db.list_processed_orders(session, "a.myshopify.com")
        others = await db.list_processed_orders(session, "b.myshopify.com")
      return row, rows, others

    row, rows, others = asyncio.run(run())
    self.assertIsNotNone(row)
    self.assertTrue(row.created_at)
    self.assertLen(rows, 1)
    self.assertEmpty(others)

  def test_storage_error_raises_ledger_error(self) -> None:
    ledger = IdempotencyLedger(_BrokenSession)
    with self.assertRaises(LedgerError):
      asyncio.run(ledger.mark_if_new("a.myshopify.com", 1))


if __name__ == "__main__":
  absltest.main()
