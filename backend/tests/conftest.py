"""Shared test fixtures for all test groups."""

import copy
import os

# Settings are read through an lru_cache; set test values before anything imports them
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret-key-that-is-at-least-32-bytes-long")
os.environ.setdefault("MAX_CONCURRENT_GENERATIONS", "1")
os.environ.setdefault("DEBUG", "false")

import pytest
from fakeredis import FakeAsyncRedis
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from serious_people.artifacts.generator_fake import FakeContentGenerator
from serious_people.core.config import Settings, get_settings
from serious_people.core.locking import PlanLock
from serious_people.db import close_db, close_redis, get_session_factory, init_db, init_redis, make_engine
from serious_people.services.artifact_job import ArtifactGenerationJob
from serious_people.services.completion_service import CompletionService
from serious_people.services.context_service import CoachingContextService

get_settings.cache_clear()

GRADUATE_FLAGS = [
    "interview_complete",
    "payment_verified",
    "module1_complete",
    "module2_complete",
    "module3_complete",
]

SAMPLE_COACHING_PLAN = {
    "name": "Leaving consulting for product",
    "modules": [
        {"name": "Job Autopsy", "objective": "Understand what is broken", "approach": "", "outcome": ""},
        {"name": "Fork in the Road", "objective": "Compare the options", "approach": "", "outcome": ""},
        {"name": "The Great Escape Plan", "objective": "Commit to a path", "approach": "", "outcome": ""},
    ],
}

SAMPLE_DOSSIER = {
    "interview_analysis": {
        "current_role": "Senior Consultant",
        "company": "Acme Partners",
        "situation": "Burned out after five years and weighing a move into product management",
        "key_facts": ["Five years tenure", "Manager is supportive"],
        "constraints": ["Mortgage", "Bonus vests in March"],
    },
    "module_records": [
        {"module_number": 1, "module_name": "Job Autopsy", "summary": "Travel is the core drain"},
    ],
}

SAMPLE_TRANSCRIPTS = {
    "interview": {
        "messages": [
            {"role": "assistant", "content": "What brings you here?"},
            {"role": "user", "content": "I want out of consulting."},
        ],
        "summary": None,
    },
    "module_1": {
        "messages": [{"role": "assistant", "content": "What drains you most?"}, {"role": "user", "content": "Travel."}],
        "summary": "Travel is the core drain",
    },
}


@pytest.fixture
def settings() -> Settings:
    """Settings tuned for fast, serialised tests on SQLite."""
    return Settings(
        auth_jwt_secret=os.environ["AUTH_JWT_SECRET"],
        max_concurrent_generations=1,
        generation_timeout_seconds=2.0,
        generation_watchdog_seconds=300.0,
        plan_lock_wait_seconds=2.0,
        poll_interval_seconds=0.01,
        poll_timeout_seconds=1.0,
    )


@pytest.fixture
async def engine(tmp_path) -> AsyncEngine:
    """File-backed SQLite engine installed as the shared database.

    Code calling get_session_factory() (route dependencies, readiness check)
    sees the test database.
    """
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine=engine)
    yield engine
    await close_db()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return get_session_factory()


@pytest.fixture
async def fake_redis():
    """FakeAsyncRedis installed as the shared Redis client."""
    client = FakeAsyncRedis(decode_responses=True)
    await init_redis(client=client)
    yield client
    await close_redis()


@pytest.fixture
def sample_transcripts() -> dict:
    """Interview and module 1 conversations (modules 2 and 3 absent)."""
    return copy.deepcopy(SAMPLE_TRANSCRIPTS)


@pytest.fixture
def fake_generator() -> FakeContentGenerator:
    """Fresh FakeContentGenerator with happy_path scenario (default)."""
    return FakeContentGenerator(scenario="happy_path")


@pytest.fixture
def make_job(session_factory, fake_redis, settings):
    """Factory for ArtifactGenerationJob wired to the test database and fake Redis."""

    def _make(generator=None, **overrides) -> ArtifactGenerationJob:
        job_settings = settings.model_copy(update=overrides) if overrides else settings
        return ArtifactGenerationJob(
            session_factory=session_factory,
            generator=generator or FakeContentGenerator(),
            lock=PlanLock(client=fake_redis, ttl=job_settings.plan_lock_ttl_seconds),
            settings=job_settings,
        )

    return _make


@pytest.fixture
def seed_user(session_factory):
    """Factory that writes completion flags and (optionally) a coaching context."""

    async def _seed(
        user_id: str,
        flags: list[str] | None = None,
        with_context: bool = True,
        planned_artifacts: list[str] | None = None,
        dossier: dict | None = SAMPLE_DOSSIER,
        transcripts: dict | None = None,
    ) -> str:
        completion = CompletionService(session_factory)
        for flag in GRADUATE_FLAGS if flags is None else flags:
            await completion.mark_complete(user_id, flag)

        if with_context:
            coaching_plan = dict(SAMPLE_COACHING_PLAN)
            if planned_artifacts is not None:
                coaching_plan["planned_artifacts"] = planned_artifacts
            await CoachingContextService(session_factory).upsert(
                user_id,
                coaching_plan,
                client_name="Jordan",
                dossier=dossier,
                transcripts=transcripts,
            )
        return user_id

    return _seed
