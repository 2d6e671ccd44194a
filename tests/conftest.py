import os

# Settings are read at import time; point them at a throwaway database first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("APP_ENV", "development")

from typing import AsyncGenerator, Callable, Dict, Optional  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.auth.security import create_access_token  # noqa: E402
from app.core.models import School, Student, Teacher  # noqa: E402
from app.db.session import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
from app.main import app  # noqa: E402


TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test, shared by the test and the app through get_db."""
    # StaticPool keeps the single in-memory connection alive across sessions.
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, future=True, poolclass=StaticPool)
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_school(db_session: AsyncSession) -> Callable:
    async def _make(name: str = "Green Valley School", code: Optional[str] = None, status: str = "active") -> School:
        school = School(
            school_name=name,
            code=code or name.upper().replace(" ", "-")[:20],
            email=f"{name.lower().replace(' ', '.')}@example.com",
            status=status,
        )
        db_session.add(school)
        await db_session.commit()
        await db_session.refresh(school)
        return school

    return _make


@pytest.fixture()
def make_student(db_session: AsyncSession) -> Callable:
    async def _make(
        school_id: int,
        admission_no: str,
        full_name: str = "Test Student",
        class_name: str = "5",
        section: Optional[str] = "A",
        roll_number: Optional[str] = None,
    ) -> Student:
        student = Student(
            school_id=school_id,
            admission_no=admission_no,
            full_name=full_name,
            class_name=class_name,
            section=section,
            roll_number=roll_number,
        )
        db_session.add(student)
        await db_session.commit()
        await db_session.refresh(student)
        return student

    return _make


@pytest.fixture()
def make_teacher(db_session: AsyncSession) -> Callable:
    async def _make(school_id: int, email: str, full_name: str = "Test Teacher") -> Teacher:
        teacher = Teacher(
            school_id=school_id,
            full_name=full_name,
            email=email,
            password_hash="not-a-real-hash",
            username=email.split("@")[0],
        )
        db_session.add(teacher)
        await db_session.commit()
        await db_session.refresh(teacher)
        return teacher

    return _make


def auth_headers(role: str, school_id: Optional[int] = None, user_id: str = "1") -> Dict[str, str]:
    claims = {"sub": user_id, "role": role}
    if school_id is not None:
        claims["school_id"] = school_id
    token = create_access_token(subject=claims)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers_for() -> Callable[..., Dict[str, str]]:
    return auth_headers
