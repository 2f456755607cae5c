import sys
import os
import pytest
from uuid import uuid4

# Add the backend directory to the Python path
# This is necessary for pytest to find the 'main' module and other packages
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.database import Base
from models.orders import Order, OrderItem, ORDER_STATUS_COMPLETED
from models.product import Product
from models.user import User


# In-memory SQLite keeps the suite self-contained
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def create_test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )

    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on
    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


@pytest.fixture
async def db_engine():
    engine = create_test_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Create a test database session"""
    async_session = sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with async_session() as session:
        yield session


async def add_user(session: AsyncSession, email: str, firstname: str, lastname: str, role: str = "Customer") -> User:
    user = User(id=uuid4(), email=email, firstname=firstname, lastname=lastname, role=role, active=True)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def add_completed_order(session: AsyncSession, product: Product, user: User = None,
                              customer_email: str = None, status: str = ORDER_STATUS_COMPLETED) -> Order:
    order = Order(
        id=uuid4(),
        user_id=user.id if user else None,
        customer_email=customer_email or (user.email if user else None),
        status=status,
        items=[OrderItem(id=uuid4(), product_id=product.id, quantity=1)],
    )
    session.add(order)
    await session.commit()
    await session.refresh(order)
    return order


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await add_user(db_session, "jane@example.com", "Jane", "Doe")


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await add_user(db_session, "sam@example.com", "Sam", "Smith")


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await add_user(db_session, "admin@example.com", "Ada", "Admin", role="Admin")


@pytest.fixture
async def test_product(db_session: AsyncSession) -> Product:
    product = Product(id=uuid4(), name="Trail Runner 2", description="Lightweight running shoe")
    db_session.add(product)
    await db_session.commit()
    await db_session.refresh(product)
    return product


@pytest.fixture
async def completed_order(db_session: AsyncSession, test_user: User, test_product: Product) -> Order:
    """A completed order by test_user containing test_product"""
    return await add_completed_order(db_session, test_product, user=test_user)
