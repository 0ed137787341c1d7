# backend/conftest.py
"""
Pytest configuration and fixtures for Alacena tests
Provides reusable test fixtures for database, users, pantry, recipes, etc.
"""

import os

# Must be set before app modules build their engine
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "development")

import pytest
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
import fakeredis
import httpx
from fastapi.testclient import TestClient

from app.models.database import Base, get_db, User, UserRole
from app.models.database import InventoryItem, Recipe, RecipeIngredient, Difficulty
from app.main import app
from app.core.redis_client import get_redis
from app.api.dependencies import get_food_client
from app.services.auth import create_token_for_user, get_password_hash
from app.services.cache import LookupCache
from app.services.open_food_facts import OpenFoodFactsClient

TEST_PASSWORD = "TestPass123"


# ===== DATABASE FIXTURES =====

@pytest.fixture(scope="function")
def test_db():
    """
    Provide a clean test database for each test
    Uses in-memory SQLite for speed
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


# ===== REDIS / OPEN FOOD FACTS FIXTURES =====

@pytest.fixture
def redis_client():
    """In-process Redis replacement, empty for every test"""
    return fakeredis.FakeRedis()


@pytest.fixture
def off_products():
    """barcode -> OFF product dict served by the mock transport"""
    return {
        "3017620422003": {
            "product_name": "Nutella",
            "product_name_es": "Nutella crema de cacao",
            "brands": "Ferrero",
            "image_url": "https://images.example/nutella.jpg",
            "categories": "Spreads, Sweet spreads",
            "categories_tags": ["en:spreads", "en:sweet-spreads"],
            "quantity": "400 g",
            "allergens_tags": ["en:milk", "en:nuts"],
            "nutriments": {"energy_value": 539, "proteins": 6.3, "carbohydrates": 57.5, "fat": 30.9},
            "ingredients_text": "Azúcar, aceite de palma, avellanas",
        },
        "8410188012092": {
            "product_name": "Leche entera",
            "brands": "Pascual",
            "categories_tags": ["en:dairies", "en:milks"],
            "nutriments": {"energy-kcal_100g": 63, "proteins": 3.1},
        },
    }


@pytest.fixture
def off_requests():
    """Every request that reached the mock Open Food Facts API"""
    return []


@pytest.fixture
def off_transport(off_products, off_requests):
    """
    Mock Open Food Facts API
    Barcodes starting with 999 answer 503, 404 answer a 404 not-found body,
    888 answer a 200 HTML maintenance page.
    """
    def handler(request: httpx.Request):
        off_requests.append(request)
        path = request.url.path

        if path.endswith("/search.json"):
            terms = request.url.params.get("search_terms", "").lower()
            products = [
                {"code": code, **product}
                for code, product in off_products.items()
                if terms in product.get("product_name", "").lower()
            ]
            return httpx.Response(200, json={"products": products})

        barcode = path.rsplit("/", 1)[-1].replace(".json", "")
        if barcode.startswith("999"):
            return httpx.Response(503, json={"status": "error"})
        if barcode.startswith("404"):
            return httpx.Response(404, json={"status": 0, "status_verbose": "product not found"})
        if barcode.startswith("888"):
            return httpx.Response(200, text="<html>maintenance</html>", headers={"content-type": "text/html"})
        if barcode in off_products:
            return httpx.Response(200, json={"status": 1, "code": barcode, "product": off_products[barcode]})
        return httpx.Response(200, json={"status": 0, "status_verbose": "product not found"})

    return httpx.MockTransport(handler)


@pytest.fixture
def food_client(redis_client, off_transport):
    return OpenFoodFactsClient(LookupCache(redis_client), transport=off_transport)


# ===== USER FIXTURES =====

@pytest.fixture
def test_user(test_db: Session):
    """Create a basic test user"""
    user = User(
        name="Test User",
        email="testuser@alacena.app",
        hashed_password=get_password_hash(TEST_PASSWORD),
        role=UserRole.USER,
        preferences={},
        is_active=True,
        created_at=datetime.utcnow()
    )
    test_db.add(user)
    test_db.commit()
    test_db.refresh(user)
    return user


@pytest.fixture
def second_test_user(test_db: Session):
    """Create a second test user for multi-user tests"""
    user = User(
        name="Second User",
        email="testuser2@alacena.app",
        hashed_password=get_password_hash(TEST_PASSWORD),
        is_active=True,
        created_at=datetime.utcnow()
    )
    test_db.add(user)
    test_db.commit()
    test_db.refresh(user)
    return user


# ===== PANTRY & RECIPE FIXTURES =====

@pytest.fixture
def test_inventory(test_db: Session, test_user: User):
    """
    Pantry with one item per expiration state:
    expired, soon (2 days), ok (30 days), unknown, plus a finished item
    """
    now = datetime.utcnow()
    rows = [
        ("Yogur natural", "Lácteos", "nevera", 2, now - timedelta(days=1), False),
        ("Leche entera", "Lácteos", "nevera", 1, now + timedelta(days=2), False),
        ("Arroz", "Cereales", "despensa", 5, now + timedelta(days=30), False),
        ("Sal", "Especias", "despensa", 1, None, False),
        ("Tomate", "Verduras", "nevera", 0, now + timedelta(days=5), True),
    ]
    items = {}
    for index, (name, category, location, quantity, expiration, finished) in enumerate(rows):
        item = InventoryItem(
            user_id=test_user.id,
            name=name,
            category=category,
            location=location,
            quantity=quantity,
            unit="unidad",
            expiration_date=expiration,
            is_finished=finished,
            created_at=now - timedelta(minutes=len(rows) - index),
        )
        test_db.add(item)
        items[name] = item
    test_db.commit()
    for item in items.values():
        test_db.refresh(item)
    return items


@pytest.fixture
def test_recipe(test_db: Session, test_user: User):
    """Arroz con leche: arroz and leche in the pantry, canela missing"""
    recipe = Recipe(
        user_id=test_user.id,
        title="Arroz con leche",
        description="Postre tradicional",
        instructions="Cocer el arroz en la leche con la canela.",
        preparation_time=45,
        servings=4,
        difficulty=Difficulty.EASY,
        categories=["postre"],
    )
    recipe.ingredients = [
        RecipeIngredient(name="Arroz", quantity=200, unit="g", position=0),
        RecipeIngredient(name="Leche", quantity=1, unit="l", position=1),
        RecipeIngredient(name="Canela", quantity=1, unit="rama", position=2),
        RecipeIngredient(name="Limón", quantity=1, unit="unidad", is_optional=True, position=3),
    ]
    test_db.add(recipe)
    test_db.commit()
    test_db.refresh(recipe)
    return recipe


# ===== AUTHENTICATION FIXTURES =====

@pytest.fixture
def auth_token(test_user: User):
    """Create a valid JWT token for test user"""
    return create_token_for_user(test_user)


@pytest.fixture
def auth_headers(auth_token: str):
    """Create authentication headers"""
    return {"Authorization": f"Bearer {auth_token}"}


# ===== API CLIENT FIXTURES =====

@pytest.fixture
def client(test_db: Session, redis_client, food_client):
    """Create test client for API wired to the test database, fake Redis and mock OFF"""
    app.dependency_overrides[get_db] = lambda: test_db
    app.dependency_overrides[get_redis] = lambda: redis_client
    app.dependency_overrides[get_food_client] = lambda: food_client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def authenticated_client(client: TestClient, auth_headers: dict):
    """Create authenticated test client"""
    client.headers.update(auth_headers)
    return client


def pytest_configure(config):
    config.addinivalue_line("markers", "api: tests that go through the HTTP layer")
    config.addinivalue_line("markers", "unit: pure function tests")
