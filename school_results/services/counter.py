from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_results.models import Counter
from school_results.core.logger import logger


class CounterService:
    @staticmethod
    async def next_id(collection: str, db: AsyncSession) -> int:
        """
        Allocate the next integer id for an entity collection.

        The counter row is locked for the rest of the caller's transaction, so
        the id and the row that uses it are committed (or rolled back) together.
        Two callers never receive the same value; ids are not gap-free.

        Args:
            collection: Collection name ("students", "marks", ...)
            db: Async SQLAlchemy session

        Returns:
            int: The allocated id, starting at 1
        """
        result = await db.execute(
            select(Counter).where(Counter.name == collection).with_for_update()
        )
        counter = result.scalars().first()

        if counter is None:
            counter = Counter(name=collection, count=1)
            db.add(counter)
        else:
            counter.count += 1

        await db.flush()
        logger.debug(f"[ID ALLOCATION] {collection} -> {counter.count}")
        return counter.count
