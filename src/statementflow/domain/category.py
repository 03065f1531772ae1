"""Category domain service."""

from typing import Optional
from statementflow.database.base import Database
from statementflow.domain.entities import Category as CategoryEntity
from statementflow.domain.errors import ConflictError

UNCATEGORIZED = "Uncategorized"

# Seeded once; the keyword table and the classifier prompt refer to these names.
DEFAULT_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("Alimentação", "#f59e0b"),
    ("Transporte", "#3b82f6"),
    ("Saúde", "#10b981"),
    ("Lazer", "#8b5cf6"),
    ("Educação", "#ec4899"),
    ("Moradia", "#ef4444"),
    ("Assinaturas", "#f97316"),
    ("Compras", "#06b6d4"),
    ("Receita", "#22c55e"),
    ("Investimentos", "#14b8a6"),
    ("Taxas", "#dc2626"),
    (UNCATEGORIZED, "#808080"),
)


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(self, name: str, color: str = "#808080") -> int:
        """Create a category.

        Args:
            name: Category name
            color: Display color as a hex string

        Returns:
            Category ID

        Raises:
            ConflictError: If a category with the same name exists
        """
        if self.db.find_category_by_name(name) is not None:
            raise ConflictError(f"Category '{name}' already exists")
        return self.db.create_category(name=name, color=color)

    def get_category(self, category_id: int) -> Optional[CategoryEntity]:
        return self.db.get_category(category_id)

    def get_category_by_name(self, name: str) -> Optional[CategoryEntity]:
        return self.db.find_category_by_name(name)

    def list_categories(self) -> list[CategoryEntity]:
        return self.db.list_categories()

    def seed_default_categories(self) -> int:
        """Create the default categories that do not exist yet.

        Returns:
            Number of categories created
        """
        created = 0
        for name, color in DEFAULT_CATEGORIES:
            if self.db.find_category_by_name(name) is None:
                self.db.create_category(name=name, color=color)
                created += 1
        return created
