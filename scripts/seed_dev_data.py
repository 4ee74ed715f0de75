import asyncio
import logging
import sys
from datetime import timedelta
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

# --- Path Setup ---
# This ensures the script can be run from the project root and find the 'app' module.
# Example command from project root: `python scripts/seed_dev_data.py`
try:
    import app
except ImportError:
    sys.path.append(str(Path(__file__).resolve().parent.parent / "src"))

from app.core.config import settings
from app.core.security import create_access_token
from app.db.session import create_engine, create_session_factory, unit_of_work
from app.dao.identity.profile_dao import ProfileDao
from app.models import Profile, PlanTier

# --- Setup Logging ---
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


class ProfileSeed(BaseModel):
    id: str
    email: str
    plan: PlanTier
    credits: int = Field(..., ge=0)


DEV_PROFILES: List[ProfileSeed] = [
    ProfileSeed(id="test-user-123", email="test@chaitra.ai", plan=PlanTier.CREATOR, credits=100),
    ProfileSeed(id="test-free-user", email="free@chaitra.ai", plan=PlanTier.FREE, credits=10),
]


async def seed_dev_profiles(db: AsyncSession, profiles: List[ProfileSeed] = DEV_PROFILES) -> List[str]:
    """Creates or resets the development profiles. Safe to run repeatedly."""
    dao = ProfileDao(db)
    seeded = []
    for seed in profiles:
        profile = await dao.get_by_id(seed.id)
        if profile is None:
            await dao.add(Profile(id=seed.id, email=seed.email, plan=seed.plan, credits=seed.credits))
        else:
            profile.email = seed.email
            profile.plan = seed.plan
            profile.credits = seed.credits
        seeded.append(seed.id)
    await db.flush()
    return seeded


# --- Main execution block ---

async def main():
    if settings.APP_ENV == "production":
        logger.critical("Refusing to seed development data in production.")
        sys.exit(1)

    engine = create_engine(settings.DATABASE_URL)
    session_factory = create_session_factory(engine)
    try:
        async with unit_of_work(session_factory) as db:
            seeded = await seed_dev_profiles(db)
    except Exception:
        logger.critical("FATAL ERROR during seeding: the transaction has been rolled back.", exc_info=True)
        sys.exit(1)
    finally:
        await engine.dispose()

    for user_id in seeded:
        token = create_access_token(user_id, expires_delta=timedelta(days=7))
        logger.info(f"Seeded profile '{user_id}'. Dev bearer token: {token}")


if __name__ == "__main__":
    asyncio.run(main())
