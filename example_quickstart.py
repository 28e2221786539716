"""
goosepage Quick Start Example

Pages through a collection forward and backward with opaque cursors.

Features covered:
- Define documents with paging settings
- Paged find with a multi-field sort
- Moving back with the previous cursor
- Paged aggregate

Run with: python example_quickstart.py
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

from goosepage import Document, PaginationRequest, connect, disconnect


class Order(Document):
    """A customer order."""

    customer: str
    total: float
    placed_at: datetime

    class Settings:
        collection = "orders"
        paging = {"default_limit": 4}


async def main():
    logging.basicConfig(level=logging.INFO)
    await connect("mongodb://localhost:27017/goosepage_demo")

    try:
        await Order.get_collection().drop()
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for i in range(10):
            await Order.create(
                customer=f"customer-{i % 3}",
                total=round(10 + (i * 7) % 25, 2),
                placed_at=start + timedelta(hours=i),
            )

        sort = {"total": -1, "placed_at": 1}

        print("Forward:")
        cursor = None
        pages = []
        while True:
            page = await Order.find_paged(PaginationRequest(sort=sort, after=cursor))
            pages.append(page)
            print(f"  {[o.total for o in page.items]} (of {page.total_count})")
            if not page.has_next:
                break
            cursor = page.next_cursor

        print("Back one page from the last:")
        back = await Order.find_paged(PaginationRequest(sort=sort, before=pages[-1].previous_cursor))
        print(f"  {[o.total for o in back.items]}")

        print("Spend per customer, two at a time:")
        pipeline = [{"$group": {"_id": "$customer", "spent": {"$sum": "$total"}}}]
        page = await Order.aggregate_paged(PaginationRequest(limit=2, sort={"spent": -1}), pipeline)
        print(f"  {page.items} has_next={page.has_next}")
    finally:
        await disconnect()


if __name__ == "__main__":
    asyncio.run(main())
