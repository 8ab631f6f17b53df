"""
Record fetching for the dashboard reports.
"""
import asyncio
import logging
from db.store import DOCUMENT_ID, Where
from errors import FetchError

logger = logging.getLogger(__name__)


class RecordFetcher:
    """
    Issues filtered queries against the record store.

    Identifier-list filters are split into sequential batches of
    `batch_size` since the store caps membership filters.
    """

    def __init__(self, store, batch_size=10):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.store = store
        self.batch_size = batch_size

    def fetch(self, collection, filters=(), order_by=None):
        try:
            records = self.store.query(collection, list(filters), order_by=order_by)
        except Exception as e:
            logger.error(f"Fetch from '{collection}' failed: {str(e)}")
            raise FetchError(collection, e) from e

        logger.info(f"Fetched {len(records)} records from '{collection}'")
        return records

    def fetch_by_ids(self, collection, ids, field=DOCUMENT_ID, filters=()):
        """
        Fetch records whose `field` is one of `ids`.

        Duplicate ids are dropped; batches run one after another and their
        results are concatenated in batch order.
        """
        unique_ids = list(dict.fromkeys(str(i) for i in ids if i is not None))
        if not unique_ids:
            return []

        batches = [
            unique_ids[i:i + self.batch_size]
            for i in range(0, len(unique_ids), self.batch_size)
        ]
        logger.info(
            f"Fetching {len(unique_ids)} ids from '{collection}' in {len(batches)} batches"
        )

        records = []
        for batch in batches:
            records.extend(self.fetch(collection, [*filters, Where(field, 'in', batch)]))
        return records

    async def afetch(self, collection, filters=(), order_by=None):
        return await asyncio.to_thread(self.fetch, collection, filters, order_by)

    async def afetch_by_ids(self, collection, ids, field=DOCUMENT_ID, filters=()):
        return await asyncio.to_thread(self.fetch_by_ids, collection, ids, field, filters)


async def gather_fetches(**fetches):
    """
    Run independent fetch coroutines concurrently and join them.

    Results are returned keyed by name, in the order the fetches were given.
    """
    names = list(fetches)
    results = await asyncio.gather(*fetches.values())
    return dict(zip(names, results))
