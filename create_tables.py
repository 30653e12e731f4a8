import asyncio
import uuid

from sqlalchemy.future import select

from app.models import User, init_db
from app.models.base import AsyncSessionLocal, engine

#  Accounts created on a fresh database
USERS = [
    {"NAME": "Administrator", "EMAIL": "admin@sekolah.com", "ROLE": "admin"},
    {"NAME": "Kepala Sekolah", "EMAIL": "kepsek@sekolah.com", "ROLE": "admin"},
]


async def main():
    await init_db()

    async with AsyncSessionLocal() as session:
        for data in USERS:
            result = await session.execute(select(User).where(User.EMAIL == data["EMAIL"]))
            if result.scalar_one_or_none():
                print(f" Exists: {data['EMAIL']}")
                continue
            session.add(User(USER_ID=str(uuid.uuid4()), IS_ACTIVE=True, **data))
            print(f" Created: {data['EMAIL']}")
        await session.commit()

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
