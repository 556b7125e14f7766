# lifecert/db/seed.py
import asyncio
import logging
import random
from datetime import datetime, timezone, timedelta
from faker import Faker
from tqdm import tqdm

from lifecert.core.config import settings
from lifecert.core.logging import configure_logging
from lifecert.core.security import hash_password
from lifecert.db.session import connect_db_pool, get_pool, close_db_pool

logger = logging.getLogger(__name__)

fake = Faker()

NUM_PENSIONERS = 50
MONTHS_OF_HISTORY = 6
DEMO_PASSWORD = "pension123"
STATUSES = ["approved", "rejected", "needs_review", "pending"]
STATUS_WEIGHTS = [0.70, 0.05, 0.10, 0.15]
RELATIONSHIPS = ["Neighbor", "Friend", "Family Member", "Doctor", "Notary"]


async def insert_user(conn, email: str, full_name: str, role: str, hashed_password: str,
                      pension_number: str | None = None, phone: str | None = None,
                      address: str | None = None, date_of_birth=None):
    sql = """
    INSERT INTO users (email, hashed_password, full_name, pension_number, phone_number,
                       address, date_of_birth, role)
    VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
    ON CONFLICT (email) DO UPDATE SET full_name = EXCLUDED.full_name
    RETURNING id;
    """
    rec = await conn.fetchrow(sql, email, hashed_password, full_name, pension_number,
                              phone, address, date_of_birth, role)
    return rec["id"]


def previous_periods(months: int) -> list[tuple[int, int]]:
    """(month, year) pairs for the ``months`` calendar months before the current one."""
    now = datetime.now()
    month, year = now.month, now.year
    periods = []
    for _ in range(months):
        month -= 1
        if month == 0:
            month, year = 12, year - 1
        periods.append((month, year))
    return periods


async def seed():
    configure_logging()
    await connect_db_pool()
    pool = await get_pool()
    if pool is None:
        raise RuntimeError("Database pool could not be initialized")

    async with pool.acquire() as conn:
        admin_id = await insert_user(
            conn,
            email=settings.ADMIN_EMAIL,
            full_name=settings.ADMIN_FULL_NAME,
            role="admin",
            hashed_password=hash_password(settings.ADMIN_PASSWORD),
        )
        logger.info(f"Admin account ready: {settings.ADMIN_EMAIL}")

        demo_hash = hash_password(DEMO_PASSWORD)
        user_ids = []
        for _ in tqdm(range(NUM_PENSIONERS), desc="Creating pensioners"):
            uid = await insert_user(
                conn,
                email=fake.unique.email(),
                full_name=fake.name(),
                role="pensioner",
                hashed_password=demo_hash,
                pension_number=f"PN-{fake.unique.random_number(digits=8, fix_len=True)}",
                phone=fake.numerify("+1-###-###-####"),
                address=fake.address().replace("\n", ", "),
                date_of_birth=fake.date_of_birth(minimum_age=60, maximum_age=95),
            )
            user_ids.append(uid)

        cert_sql = """
        INSERT INTO life_certificates
        (user_id, month, year, witness_name, witness_phone, witness_relationship,
         status, admin_notes, reviewed_by, reviewed_at, created_at)
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
        ON CONFLICT ON CONSTRAINT uq_life_certificates_user_period DO NOTHING
        """
        batch = []
        for uid in tqdm(user_ids, desc="Creating certificate history"):
            for month, year in previous_periods(MONTHS_OF_HISTORY):
                status = random.choices(STATUSES, weights=STATUS_WEIGHTS)[0]
                created_at = datetime(year, month, random.randint(1, 28), tzinfo=timezone.utc)
                reviewed = status != "pending"
                batch.append((
                    uid, month, year,
                    fake.name(),
                    fake.numerify("+1-###-###-####"),
                    random.choice(RELATIONSHIPS),
                    status,
                    fake.sentence(nb_words=5) if reviewed else None,
                    admin_id if reviewed else None,
                    created_at + timedelta(days=random.randint(1, 2)) if reviewed else None,
                    created_at,
                ))
        await conn.executemany(cert_sql, batch)
        logger.info(f"Seed complete: {len(user_ids)} pensioners, {len(batch)} certificates.")

    await close_db_pool()


if __name__ == "__main__":
    asyncio.run(seed())
