import pytest
from typing import AsyncGenerator, Iterable, Optional
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from main import app
from modbase.core.database import get_async_session
from modbase.core.security import create_access_token
from modbase.db.seeds.initial_data import seed
from modbase.models.access.permission import Permission
from modbase.models.access.role import Role
from modbase.models.access.user import User
from modbase.models.access.user_permission import UserPermission
from modbase.models.access.user_role import UserRole
from modbase.db.init_db import create_tables, drop_tables

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine():
    """Fresh in-memory database per test"""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_tables(test_engine)

    yield test_engine

    await drop_tables(test_engine)
    await test_engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as db:
        yield db


@pytest.fixture
async def client(session_maker) -> AsyncGenerator[AsyncClient, None]:
    """Test client whose requests use the test database"""
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as db:
            yield db

    app.dependency_overrides[get_async_session] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def seeded(session: AsyncSession) -> dict:
    """Initial roles plus the access and blog permission sets"""
    return await seed(session)


@pytest.fixture
def make_user(session: AsyncSession):
    """Factory creating a user with the given role names / permission names"""
    counter = {"value": 0}

    async def factory(
        roles: Iterable[str] = (),
        permissions: Iterable[str] = (),
        active: bool = True,
        confirmed: bool = True,
        email: Optional[str] = None,
    ) -> User:
        counter["value"] += 1
        user = User(
            name=f"User {counter['value']}",
            email=email or f"user{counter['value']}@example.com",
            active=active,
            confirmed=confirmed,
        )
        session.add(user)
        await session.flush()

        for name in roles:
            role = (await session.execute(Role.__table__.select().where(Role.name == name))).first()
            if role is None:
                role = Role(name=name)
                session.add(role)
                await session.flush()
            session.add(UserRole(user_id=user.id, role_id=role.id))

        for name in permissions:
            permission = (await session.execute(Permission.__table__.select().where(Permission.name == name))).first()
            if permission is None:
                permission = Permission(name=name, display_name=name)
                session.add(permission)
                await session.flush()
            session.add(UserPermission(user_id=user.id, permission_id=permission.id))

        await session.commit()
        return user

    return factory


@pytest.fixture
async def admin_user(seeded, make_user) -> User:
    return await make_user(roles=["Administrator"], email="admin@example.com")


@pytest.fixture
async def executive_user(seeded, make_user) -> User:
    return await make_user(roles=["Executive"], email="executive@example.com")


@pytest.fixture
async def plain_user(seeded, make_user) -> User:
    return await make_user(roles=["User"], email="plain@example.com")


def token_headers(user: User, ajax: bool = False) -> dict:
    """API headers authenticating as `user`"""
    headers = {
        "Authorization": f"Bearer {create_access_token(user.id)}",
        "Accept": "application/json",
    }
    if ajax:
        headers["X-Requested-With"] = "XMLHttpRequest"
    return headers


@pytest.fixture
async def blog(session: AsyncSession) -> dict:
    """Two categories, three tags and four posts (one of them trashed)"""
    from datetime import datetime, timezone
    from modbase.models.blog.category import Category
    from modbase.models.blog.post import Post
    from modbase.models.blog.tag import PostTag, Tag

    news = Category(name="News", slug="news")
    tech = Category(name="Tech", slug="tech")
    session.add_all([news, tech])
    await session.flush()

    python = Tag(name="Python", slug="python")
    sql = Tag(name="SQL", slug="sql")
    misc = Tag(name="Misc", slug="misc")
    session.add_all([python, sql, misc])
    await session.flush()

    alpha = Post(name="Alpha", slug="alpha", body="First post about python", category_id=news.id)
    beta = Post(name="Beta", slug="beta", body="Databases and python", category_id=tech.id)
    gamma = Post(name="Gamma", slug="gamma", body="Draft", active=False)
    delta = Post(name="Delta", slug="delta", body="Old news", category_id=news.id,
                 deleted_at=datetime.now(timezone.utc))
    session.add_all([alpha, beta, gamma, delta])
    await session.flush()

    session.add_all([
        PostTag(post_id=alpha.id, tag_id=python.id),
        PostTag(post_id=beta.id, tag_id=python.id),
        PostTag(post_id=beta.id, tag_id=sql.id),
    ])
    await session.commit()

    return {
        "categories": {"news": news, "tech": tech},
        "tags": {"python": python, "sql": sql, "misc": misc},
        "posts": {"alpha": alpha, "beta": beta, "gamma": gamma, "delta": delta},
    }
