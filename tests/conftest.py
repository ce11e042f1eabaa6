"""Test configuration and fixtures."""

import os

import pytest
from sqlalchemy import ForeignKey, String, Text, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool

# Set test environment variables BEFORE importing the package
os.environ["ENVIRONMENT"] = "test"
os.environ.pop("COLUMN_ENCRYPTION_KEY", None)

from column_encryption.config import get_settings
from column_encryption.security.encryption import AesGcmColumnEncryptionProvider


TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; tests patch the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def key() -> bytes:
    return bytes(range(32))


@pytest.fixture
def provider(key):
    with AesGcmColumnEncryptionProvider(key) as p:
        yield p


@pytest.fixture
def models():
    """Fresh declarative models per test, since column types get swapped."""

    class Base(DeclarativeBase):
        pass

    class Tenant(Base):
        __tablename__ = "tenants"

        id: Mapped[int] = mapped_column(primary_key=True)
        name: Mapped[str] = mapped_column(String(100))

    class Customer(Base):
        __tablename__ = "customers"

        id: Mapped[int] = mapped_column(primary_key=True)
        tenant_id: Mapped[int] = mapped_column(ForeignKey("tenants.id"))
        email: Mapped[str] = mapped_column(String(255))
        notes: Mapped[str] = mapped_column(Text, nullable=True)
        visits: Mapped[int] = mapped_column(default=0)

    return Base, Tenant, Customer


@pytest.fixture
def engine():
    test_engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    yield test_engine
    test_engine.dispose()
