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

"""Database management and persistence layer for the routing adapter.

The only state the adapter owns is the processed-orders ledger: one row per
(shop, order) pair that has been claimed for submission to the delivery
provider. It utilizes SQLAlchemy with SQLite (via aiosqlite).

Key features include:
- `DatabaseManager`: Handles asynchronous engine initialization and session
  factory setup for the ledger database.
- WAL Mode: Automatically enables SQLite Write-Ahead Logging so concurrent
  webhook handlers can claim orders without blocking readers.
- `insert_processed_order`: A single conditional insert backed by the
  primary key, so two handlers racing on one order cannot both win.
"""

import datetime
import logging
from typing import List
from typing import Optional

from sqlalchemy import Column
from sqlalchemy import select
from sqlalchemy import String
from sqlalchemy import text
from sqlalchemy.dialects import sqlite
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker

logger = logging.getLogger(__name__)

LedgerBase = declarative_base()


class DatabaseManager:
  """Manages the ledger engine and sessions without using global variables."""

  def __init__(self) -> None:
    self.engine: Optional[AsyncEngine] = None
    self.session_factory: Optional[sessionmaker] = None

  async def init_db(self, ledger_path: str) -> None:
    """Initializes the database engine and creates tables."""
    url = f"sqlite+aiosqlite:///{ledger_path}"
    self.engine = create_async_engine(url, echo=False)

    async with self.engine.connect() as conn:
      await conn.execute(text("PRAGMA journal_mode=WAL"))

    self.session_factory = sessionmaker(
        self.engine, expire_on_commit=False, class_=AsyncSession
    )

    async with self.engine.begin() as conn:
      await conn.run_sync(LedgerBase.metadata.create_all)
    logger.info("Processed-orders ledger ready at %s", ledger_path)

  async def close(self) -> None:
    """Closes the database engine."""
    if self.engine:
      await self.engine.dispose()


# Global manager instance (to be initialized via lifespan)
manager = DatabaseManager()


class ProcessedOrder(LedgerBase):
  __tablename__ = "processed_orders"

  shop = Column(String, primary_key=True)
  order_id = Column(String, primary_key=True)
  created_at = Column(String)


# --- Data Access Helpers ---


async def insert_processed_order(
    session: AsyncSession, shop: str, order_id: str
) -> bool:
  """Inserts a ledger row unless one already exists.

  Args:
    session: The database session to use. The caller commits.
    shop: The shop domain.
    order_id: The platform order ID.

  Returns:
    True if this call created the row, False if it was already present.
  """
  stmt = (
      sqlite.insert(ProcessedOrder)
      .values(
          shop=shop,
          order_id=order_id,
          created_at=datetime.datetime.now(datetime.timezone.utc).isoformat(),
      )
      .on_conflict_do_nothing(index_elements=["shop", "order_id"])
  )
  result = await session.execute(stmt)
  return result.rowcount > 0


async def get_processed_order(
    session: AsyncSession, shop: str, order_id: str
) -> Optional[ProcessedOrder]:
  """Retrieves a ledger row by its key."""
  return await session.get(ProcessedOrder, (shop, order_id))


async def list_processed_orders(
    session: AsyncSession, shop: Optional[str] = None
) -> List[ProcessedOrder]:
  """Retrieves ledger rows, oldest first, optionally for a single shop."""
  stmt = select(ProcessedOrder).order_by(ProcessedOrder.created_at)
  if shop:
    stmt = stmt.where(ProcessedOrder.shop == shop)
  result = await session.execute(stmt)
  return list(result.scalars().all())
