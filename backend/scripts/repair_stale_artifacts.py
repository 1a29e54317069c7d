"""Repair artifacts stuck in "generating": reset them to pending and regenerate.

Usage:
    python scripts/repair_stale_artifacts.py            # report only
    python scripts/repair_stale_artifacts.py --apply    # reset and regenerate
"""

import argparse
import asyncio

from sqlalchemy import select

from serious_people.artifacts.generator_real import AnthropicContentGenerator
from serious_people.core.config import get_settings
from serious_people.core.locking import PlanLock
from serious_people.core.logging import configure_structlog
from serious_people.db import close_db, close_redis, get_session_factory, init_db, init_redis
from serious_people.db.models.serious_plan import SeriousPlan
from serious_people.services.artifact_job import ArtifactGenerationJob


async def main(apply: bool) -> None:
    settings = get_settings()
    configure_structlog(json_logs=False)
    await init_db()
    await init_redis()

    try:
        factory = get_session_factory()
        job = ArtifactGenerationJob(
            session_factory=factory,
            generator=AnthropicContentGenerator(settings),
            lock=PlanLock(ttl=settings.plan_lock_ttl_seconds),
            settings=settings,
        )

        stale = await job.find_stale_generating()
        print(f"Found {len(stale)} stale artifact(s):")
        for artifact in stale:
            print(f"  {artifact.id} | plan={artifact.plan_id} | key={artifact.artifact_key}")

        if not apply or not stale:
            return

        plan_ids = {a.plan_id for a in stale}
        async with factory() as session:
            result = await session.execute(select(SeriousPlan.user_id).where(SeriousPlan.id.in_(plan_ids)))
            user_ids = list(result.scalars().all())

        for user_id in user_ids:
            ensured = await job.ensure_artifacts(user_id)
            outcome = await job.generate_many(ensured.pending_artifact_ids)
            print(f"  user={user_id} regenerated {len(outcome)} artifact(s)")
    finally:
        await close_redis()
        await close_db()

    print("\nALL DONE")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--apply", action="store_true", help="Reset and regenerate instead of reporting")
    args = parser.parse_args()
    asyncio.run(main(args.apply))
