"""
kvl — Basic usage

add never overwrites, update never creates, upsert always writes.
Batches are one transaction; scans stream the table page by page.
"""

import asyncio

from pydantic import BaseModel

from kvl import PydanticSerializer, SQLiteStore, StoreConfig


class Session(BaseModel):
    user: str
    hits: int = 0


async def main():
    # ──────────────────────────────────────
    #  1. Open a store for Session values
    # ──────────────────────────────────────
    config = StoreConfig(path="sessions.db", page_size=2)
    async with SQLiteStore(config=config, serializer=PydanticSerializer(Session)) as store:
        # ──────────────────────────────────────
        #  2. Single-entry writes
        # ──────────────────────────────────────
        await store.add(b"s1", Session(user="alice"))
        await store.add(b"s1", Session(user="mallory"))  # ignored: key exists
        await store.update(b"s9", Session(user="ghost"))  # ignored: key absent
        await store.upsert(b"s2", Session(user="bob", hits=3))

        print("s1 ->", (await store.get(b"s1")).value)
        print("s9 found?", (await store.get(b"s9")).found)

        # ──────────────────────────────────────
        #  3. One transaction for many entries
        # ──────────────────────────────────────
        await store.add_many(
            (f"s{i}".encode(), Session(user=f"user{i}")) for i in range(3, 7)
        )

        # ──────────────────────────────────────
        #  4. Stream everything back
        # ──────────────────────────────────────
        scanner = store.scan()
        async for key, session in scanner:
            print(f"  {key.decode()}: {session.user} ({session.hits} hits)")
        print(f"{await store.count()} sessions in {scanner.pages_fetched} pages")


if __name__ == "__main__":
    asyncio.run(main())
