"""
Fixtures compartidos: una base SQLite en memoria nueva por test, con un tenant,
dos sucursales, un usuario por rol, tarifas y habitaciones.
"""
import os
import sys
import tempfile
from pathlib import Path
from types import SimpleNamespace

# Debe setearse antes de que se importe config
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "hotel_pms_tests.log"))
os.environ.setdefault("RATE_LIMIT_LOGIN", "1000/minute")
os.environ.setdefault("SECRET_KEY", "test-secret")

sys.path.insert(0, str(Path(__file__).parent.parent))

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.conexion import Base, get_db
from models import Branch, Rate, Room, Tenant, User
from models.enums import UserRole
from utils.auth import create_access_token, get_password_hash, token_claims_for

TEST_PASSWORD = "secret123"


@pytest.fixture(scope="session")
def password_hash():
    return get_password_hash(TEST_PASSWORD)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed(db, password_hash):
    """Ids de las filas creadas; ints simples para que sobrevivan a la expiración de la sesión"""
    tenant = Tenant(tenant_name="Sunrise Hotels", max_branch_count=2, max_user_count=10)
    db.add(tenant)
    db.flush()

    branch = Branch(tenant_id=tenant.id, branch_name="Main", branch_code="MAIN")
    other_branch = Branch(tenant_id=tenant.id, branch_name="Annex", branch_code="ANNEX")
    db.add_all([branch, other_branch])
    db.flush()

    def user(username, role, branch_id=None, tenant_id=tenant.id):
        u = User(
            first_name=username.capitalize(),
            last_name="Tester",
            username=username,
            password_hash=password_hash,
            role=role,
            tenant_id=tenant_id,
            tenant_branch_id=branch_id,
        )
        db.add(u)
        return u

    sysad = user("root", UserRole.SYSAD, tenant_id=None)
    admin = user("admin", UserRole.ADMIN)
    staff = user("frontdesk", UserRole.STAFF, branch.id)
    housekeeper = user("maid", UserRole.HOUSEKEEPING, branch.id)
    db.flush()

    short_stay = Rate(
        tenant_id=tenant.id, branch_id=branch.id, name="3 Hours",
        price=Decimal("300.00"), hours=3, excess_hour_price=Decimal("100.00"),
    )
    hourly = Rate(
        tenant_id=tenant.id, branch_id=branch.id, name="Hourly",
        price=Decimal("0.00"), hours=0, excess_hour_price=Decimal("120.00"),
    )
    db.add_all([short_stay, hourly])
    db.flush()

    room_a = Room(
        tenant_id=tenant.id, branch_id=branch.id, room_name="Room 101", room_code="101",
        floor=1, hotel_rate_ids=[short_stay.id, hourly.id],
    )
    room_b = Room(
        tenant_id=tenant.id, branch_id=branch.id, room_name="Room 102", room_code="102",
        floor=1, hotel_rate_ids=[short_stay.id],
    )
    db.add_all([room_a, room_b])
    db.commit()

    return SimpleNamespace(
        tenant_id=tenant.id,
        branch_id=branch.id,
        other_branch_id=other_branch.id,
        sysad_id=sysad.id,
        admin_id=admin.id,
        staff_id=staff.id,
        housekeeper_id=housekeeper.id,
        rate_id=short_stay.id,
        hourly_rate_id=hourly.id,
        room_id=room_a.id,
        room_b_id=room_b.id,
    )


@pytest.fixture
def client(engine, db):
    from main import app
    from utils.rate_limiter import limiter

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        limiter.enabled = True


@pytest.fixture
def auth_headers(db):
    def headers_for(user_id):
        user = db.get(User, user_id)
        token = create_access_token(token_claims_for(user))
        return {"Authorization": f"Bearer {token}"}
    return headers_for
