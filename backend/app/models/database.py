#/backend/models/database.py
from sqlalchemy import create_engine, Column, Integer, String, JSON, DateTime, ForeignKey, Text, Boolean, Enum, Numeric, Index
from sqlalchemy.orm import declarative_base, relationship, sessionmaker
from datetime import datetime
import enum
from app.core.config import settings

Base = declarative_base()

# Create engine
_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
engine = create_engine(settings.database_url, echo=settings.database_echo, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Enums
class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"

class Difficulty(str, enum.Enum):
    EASY = "fácil"
    MEDIUM = "medio"
    HARD = "difícil"

class Priority(str, enum.Enum):
    LOW = "baja"
    MEDIUM = "media"
    HIGH = "alta"

DEFAULT_UNIT = "unidad"
DEFAULT_LOCATION = "despensa"

# Quantities are DECIMAL(10, 2) in the schema but handled as floats in Python
Quantity = Numeric(10, 2, asdecimal=False)

# User Tables
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(Enum(UserRole, values_callable=lambda e: [m.value for m in e]), default=UserRole.USER, nullable=False)
    preferences = Column(JSON, default=dict)
    reset_token = Column(String(64), nullable=True, index=True)
    reset_token_expiry = Column(DateTime, nullable=True)
    last_login = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    inventory = relationship("InventoryItem", back_populates="user", cascade="all, delete-orphan")
    recipes = relationship("Recipe", back_populates="user", cascade="all, delete-orphan")
    shopping_lists = relationship("ShoppingList", back_populates="user", cascade="all, delete-orphan")

# Pantry Tables
class InventoryItem(Base):
    __tablename__ = "inventory"
    __table_args__ = (
        Index("inventory_user_id_idx", "user_id"),
        Index("inventory_barcode_idx", "barcode"),
        Index("inventory_category_idx", "category"),
        Index("inventory_expiration_idx", "expiration_date"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    barcode = Column(String(100), nullable=True)
    category = Column(String(100), nullable=False)  # open set: Lácteos, Frutas, ...
    quantity = Column(Quantity, nullable=False, default=1)
    unit = Column(String(50), nullable=False, default=DEFAULT_UNIT)
    expiration_date = Column(DateTime, nullable=True)
    purchase_date = Column(DateTime, nullable=True)
    location = Column(String(100), nullable=False, default=DEFAULT_LOCATION)  # despensa, nevera, congelador
    notes = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)
    nutritional_info = Column(JSON, nullable=True)  # {"calories": ..., "proteins": ..., ...}
    is_finished = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="inventory")

class Recipe(Base):
    __tablename__ = "recipes"
    __table_args__ = (
        Index("recipe_user_id_idx", "user_id"),
        Index("recipe_title_idx", "title"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    instructions = Column(Text, nullable=False)
    preparation_time = Column(Integer, nullable=True)  # minutes
    servings = Column(Integer, nullable=True)
    difficulty = Column(Enum(Difficulty, values_callable=lambda e: [m.value for m in e]), default=Difficulty.MEDIUM)
    image_url = Column(String(500), nullable=True)
    categories = Column(JSON, default=list)  # ["desayuno", "vegetariano"]
    is_favorite = Column(Boolean, default=False, nullable=False)
    nutritional_info = Column(JSON, nullable=True)
    source = Column(String(500), nullable=True)  # URL or where the recipe came from
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="recipes")
    ingredients = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeIngredient.position",
    )

class RecipeIngredient(Base):
    __tablename__ = "recipe_ingredients"
    __table_args__ = (
        Index("recipe_ingredient_recipe_id_idx", "recipe_id"),
        Index("recipe_ingredient_inventory_id_idx", "inventory_id"),
    )

    id = Column(Integer, primary_key=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    quantity = Column(Quantity, nullable=False)
    unit = Column(String(50), nullable=False)
    notes = Column(String(255), nullable=True)  # "diced", "minced", etc.
    is_optional = Column(Boolean, default=False, nullable=False)
    inventory_id = Column(Integer, ForeignKey("inventory.id", ondelete="SET NULL"), nullable=True)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    recipe = relationship("Recipe", back_populates="ingredients")
    inventory_item = relationship("InventoryItem")

# Shopping Tables
class ShoppingList(Base):
    __tablename__ = "shopping_lists"
    __table_args__ = (
        Index("shopping_list_user_id_idx", "user_id"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    planned_date = Column(DateTime, nullable=True)
    store = Column(String(255), nullable=True)
    budget = Column(Quantity, nullable=True)
    is_complete = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="shopping_lists")
    items = relationship(
        "ShoppingListItem",
        back_populates="shopping_list",
        cascade="all, delete-orphan",
        order_by="ShoppingListItem.position",
    )

class ShoppingListItem(Base):
    __tablename__ = "shopping_list_items"
    __table_args__ = (
        Index("shopping_list_item_list_id_idx", "shopping_list_id"),
        Index("shopping_list_item_inventory_id_idx", "inventory_id"),
        Index("shopping_list_item_recipe_id_idx", "recipe_id"),
    )

    id = Column(Integer, primary_key=True)
    shopping_list_id = Column(Integer, ForeignKey("shopping_lists.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    quantity = Column(Quantity, nullable=False, default=1)
    unit = Column(String(50), nullable=False, default=DEFAULT_UNIT)
    category = Column(String(100), nullable=True)
    notes = Column(String(255), nullable=True)
    priority = Column(Enum(Priority, values_callable=lambda e: [m.value for m in e]), default=Priority.MEDIUM)
    is_purchased = Column(Boolean, default=False, nullable=False)
    price = Column(Quantity, nullable=True)
    inventory_id = Column(Integer, ForeignKey("inventory.id", ondelete="SET NULL"), nullable=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="SET NULL"), nullable=True)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    shopping_list = relationship("ShoppingList", back_populates="items")
    inventory_item = relationship("InventoryItem")
    recipe = relationship("Recipe")
