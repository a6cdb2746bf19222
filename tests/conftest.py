from __future__ import annotations

import os

# Point the application at SQLite before any hospital_finder module builds its engine
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("APP_ENV", "test")

import httpx
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from hospital_finder.db.models.hospital import Hospital
from hospital_finder.db.session import get_db_session, init_models


@pytest.fixture()
async def engine():
    # StaticPool keeps one connection, so the in-memory database survives across sessions
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest.fixture()
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def client(session_factory):
    from main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()


@pytest.fixture()
def make_hospital(session_factory):
    """Insert a hospital and return it; keyword overrides any column."""

    async def _make_hospital(**overrides) -> Hospital:
        values = dict(
            name="City General Hospital",
            category="Public",
            state="Karnataka",
            district="Bengaluru Urban",
            address="1 MG Road",
            telephone="080-1234567",
            emergency_num="108",
            email="contact@citygeneral.example",
            specialties=["Cardiology", "Neurology"],
            facilities=["ICU"],
            total_beds=20,
            available_beds=5,
            latitude=12.9716,
            longitude=77.5946,
        )
        values.update(overrides)
        async with session_factory() as session:
            hospital = Hospital(**values)
            session.add(hospital)
            await session.commit()
            return hospital

    return _make_hospital


@pytest.fixture()
def booking_payload():
    def _payload(hospital_id: str, **overrides) -> dict:
        payload = {
            "hospitalId": hospital_id,
            "patientName": "Asha Rao",
            "patientAge": 42,
            "patientGender": "Female",
            "contactPhone": "9876543210",
            "contactEmail": "asha@example.com",
            "emergencyType": "Cardiac",
            "medicalCondition": "Chest pain",
        }
        payload.update(overrides)
        return payload

    return _payload
