from sqlalchemy import select

from school_results.models import Counter
from school_results.services.counter import CounterService


async def test_first_id_is_one(db):
    assert await CounterService.next_id("students", db) == 1


async def test_ids_increase_per_collection(db):
    ids = [await CounterService.next_id("marks", db) for _ in range(3)]
    await db.commit()

    assert ids == [1, 2, 3]
    assert await CounterService.next_id("subjects", db) == 1


async def test_counter_survives_commit(db):
    await CounterService.next_id("classes", db)
    await CounterService.next_id("classes", db)
    await db.commit()

    counter = (await db.execute(select(Counter).where(Counter.name == "classes"))).scalars().one()
    assert counter.count == 2
    assert await CounterService.next_id("classes", db) == 3


async def test_rolled_back_allocation_is_not_kept(db):
    await CounterService.next_id("sessions", db)
    await db.commit()

    await CounterService.next_id("sessions", db)
    await db.rollback()

    assert await CounterService.next_id("sessions", db) == 2
