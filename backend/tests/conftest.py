import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from backend.app.api.deps import get_db
from backend.app.db.base import Base
from backend.app.db.models import models_v1  # noqa: F401  (tables on Base.metadata)
from backend.app.db.models.core_types import Role
from backend.app.db.models.models_v1 import InventoryItem, Supplier
from backend.app.db.session import enable_sqlite_foreign_keys
from backend.services.auth import Actor


@pytest.fixture(scope="function")
def db_session() -> Session:
    """
    Session DB isolée par test.

    Base SQLite en mémoire, schéma créé puis détruit à chaque test :
    rien ne fuit d'un test à l'autre, même après commit().
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)

    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


# ---------- Actors ----------
@pytest.fixture
def admin() -> Actor:
    return Actor(name="alice", role=Role.admin)


@pytest.fixture
def storekeeper() -> Actor:
    return Actor(name="sam", role=Role.storekeeper)


@pytest.fixture
def technician() -> Actor:
    return Actor(name="tom", role=Role.technician)


@pytest.fixture
def viewer() -> Actor:
    return Actor(name="vic", role=Role.viewer)


# ---------- Factories ----------
@pytest.fixture
def make_supplier(db_session):
    counter = {"n": 0}

    def _make(name: str | None = None, active: bool = True, **kwargs) -> Supplier:
        counter["n"] += 1
        s = Supplier(name=name or f"TEST-SUP-{counter['n']}", active=active, **kwargs)
        db_session.add(s)
        db_session.flush()
        return s

    return _make


@pytest.fixture
def make_item(db_session):
    def _make(part_name: str = "Compressor", qty: int = 0, **kwargs) -> InventoryItem:
        kwargs.setdefault("building", "Block A")
        kwargs.setdefault("min_stock", 1)
        item = InventoryItem(part_name=part_name, quantity_on_hand=qty, **kwargs)
        db_session.add(item)
        db_session.flush()
        return item

    return _make


# ---------- API ----------
@pytest.fixture
def client(db_session):
    from backend.app.main import app

    def _override_get_db():
        try:
            yield db_session
        except Exception:
            db_session.rollback()
            raise

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth():
    def _headers(actor: Actor) -> dict[str, str]:
        return {"X-User-Name": actor.name, "X-User-Role": actor.role.value}

    return _headers
