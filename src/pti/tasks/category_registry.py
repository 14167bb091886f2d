# src/pti/tasks/category_registry.py

from __future__ import annotations

import logging

from .errors import CategoryNotFoundError
from .task_models import Category, Database

logger = logging.getLogger(__name__)


class CategoryRegistry:
    """Category half of the aggregate: hotkey lookup, visibility and the default pointer."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def get_category(self, category_id: int) -> Category:
        category = self._db.find_category(category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        return category

    def by_hotkey(self, hotkey: str) -> Category | None:
        # Hotkeys are not unique; the first match wins.
        for category in self._db.categories:
            if category.hotkey == hotkey:
                return category
        return None

    def toggle_visible(self, category_id: int) -> bool:
        category = self.get_category(category_id)
        category.visible = not category.visible
        logger.debug("Category %s visible=%s", category_id, category.visible)
        return category.visible

    def set_default(self, category_id: int) -> None:
        # No existence check; add_task refuses to use a dangling default.
        self._db.default_category_id = category_id
        logger.debug("Default category=%s", category_id)

    @property
    def default_category_id(self) -> int:
        return self._db.default_category_id
