"""Use case managing the owner's category tree."""

from datetime import date

from finledger.application.ports.ledger_store import (
    LedgerSessionPort,
    LedgerStorePort,
)
from finledger.application.requests import (
    CreateCategoryInput,
    UpdateCategoryInput,
)
from finledger.application.use_cases.validation import require_found, require_text
from finledger.domain.constants import DEFAULT_CATEGORY_TREE
from finledger.domain.errors import ValidationError
from finledger.domain.models import Category, CategoryActivity
from finledger.domain.policies.categories import would_create_cycle
from finledger.domain.services.reports import summarize_category_activity
from finledger.infrastructure.logging.logger import get_app_logger
from finledger.utils.records import new_id


class CategoriesUseCase:
    """Create, rename, move and delete categories."""

    def __init__(self, store: LedgerStorePort, logger=None) -> None:
        """Initialize the use case.

        Args:
            store: Ledger store opening units of work.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._store = store
        self._logger = logger or get_app_logger()

    def create(self, owner_id: str, request: CreateCategoryInput) -> Category:
        """Create a category, optionally under a parent.

        Raises:
            NotFoundError: If the parent is missing or not visible.
            ValidationError: If the name is taken at the same level.
        """
        category = Category(
            id=new_id(),
            owner_id=owner_id,
            name=require_text(request.name, "Category name"),
            parent_id=request.parent_id,
        )
        with self._store.unit_of_work() as session:
            if category.parent_id is not None:
                self._check_parent(session, owner_id, None, category.parent_id)
            self._check_unique_name(
                session,
                owner_id,
                category.name,
                category.parent_id,
                None,
            )
            session.insert_category(category)
        self._logger.info(f"Created category {category.id} for owner {owner_id}")
        return category

    def update(
        self,
        owner_id: str,
        category_id: str,
        request: UpdateCategoryInput,
    ) -> Category:
        """Rename a category or move it under another parent.

        Setting ``detach_from_parent`` turns a subcategory into a top-level one.

        Raises:
            ValidationError: If the category is a shared default, the move
                would create a cycle, the name is taken at the target level,
                or a parent is given together with ``detach_from_parent``.
        """
        if request.detach_from_parent and request.parent_id is not None:
            raise ValidationError(
                "Cannot set a parent and detach from it at the same time",
            )
        with self._store.unit_of_work() as session:
            category = self._owned(session, owner_id, category_id)
            name = (
                require_text(request.name, "Category name")
                if request.name is not None
                else category.name
            )
            if request.detach_from_parent:
                parent_id = None
            elif request.parent_id is not None:
                parent_id = request.parent_id
            else:
                parent_id = category.parent_id
            if request.parent_id is not None:
                self._check_parent(session, owner_id, category_id, parent_id)
            if name != category.name or parent_id != category.parent_id:
                self._check_unique_name(
                    session,
                    owner_id,
                    name,
                    parent_id,
                    category_id,
                )
            session.update_category(
                category_id,
                {"name": name, "parent_id": parent_id},
            )
            return session.get_category(owner_id, category_id)

    def delete(self, owner_id: str, category_id: str) -> None:
        """Delete an unused leaf category.

        Raises:
            ValidationError: If the category is a default, has children, or
                is used by transactions or budgets.
        """
        with self._store.unit_of_work() as session:
            self._owned(session, owner_id, category_id)
            if session.count_child_categories(category_id):
                raise ValidationError("Cannot delete a category with children")
            if session.count_category_references(category_id):
                raise ValidationError(
                    "Cannot delete a category used by transactions or budgets"
                )
            session.delete_category(category_id)
        self._logger.info(f"Deleted category {category_id}")

    def get(self, owner_id: str, category_id: str) -> Category:
        with self._store.unit_of_work() as session:
            return require_found(
                session.get_category(owner_id, category_id),
                "Category",
            )

    def list_categories(self, owner_id: str) -> list[Category]:
        with self._store.unit_of_work() as session:
            return session.list_categories(owner_id)

    def usage(
        self,
        owner_id: str,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[CategoryActivity]:
        """Return net activity per visible category, busiest first.

        Pending rows count; transfers do not. Either bound may be omitted.

        Raises:
            ValidationError: If ``date_from`` is after ``date_to``.
        """
        if date_from and date_to and date_from > date_to:
            raise ValidationError("date_from must not be after date_to")
        with self._store.unit_of_work() as session:
            visible = session.list_categories(owner_id)
            totals = session.category_type_totals(owner_id, date_from, date_to)
        return summarize_category_activity(visible, totals)

    def create_defaults(self, owner_id: str) -> list[Category]:
        """Create the starter category tree for an owner.

        Names the owner already uses at the same level are kept and reused as
        parents, so running this twice creates nothing the second time.

        Returns:
            list[Category]: The categories created by this call.
        """
        created: list[Category] = []
        with self._store.unit_of_work() as session:
            for parent_name, children in DEFAULT_CATEGORY_TREE:
                parent = self._find_or_add(
                    session, owner_id, parent_name, None, created
                )
                for child_name in children:
                    self._find_or_add(
                        session, owner_id, child_name, parent.id, created
                    )
        self._logger.info(
            f"Created {len(created)} default categories for owner {owner_id}"
        )
        return created

    @staticmethod
    def _owned(
        session: LedgerSessionPort,
        owner_id: str,
        category_id: str,
    ) -> Category:
        category = require_found(
            session.get_category(owner_id, category_id),
            "Category",
        )
        if category.is_default or category.owner_id != owner_id:
            raise ValidationError("Default categories cannot be modified")
        return category

    @staticmethod
    def _check_parent(
        session: LedgerSessionPort,
        owner_id: str,
        category_id: str | None,
        parent_id: str,
    ) -> None:
        if category_id is not None and parent_id == category_id:
            raise ValidationError("A category cannot be its own parent")
        require_found(session.get_category(owner_id, parent_id), "Parent category")
        if would_create_cycle(category_id, parent_id, session.get_parent_id):
            raise ValidationError("Category parent would create a cycle")

    @staticmethod
    def _find_or_add(
        session: LedgerSessionPort,
        owner_id: str,
        name: str,
        parent_id: str | None,
        created: list[Category],
    ) -> Category:
        existing = session.find_category_by_name(owner_id, name, parent_id)
        if existing is not None:
            return existing
        category = Category(
            id=new_id(),
            owner_id=owner_id,
            name=name,
            parent_id=parent_id,
        )
        session.insert_category(category)
        created.append(category)
        return category

    @staticmethod
    def _check_unique_name(
        session: LedgerSessionPort,
        owner_id: str,
        name: str,
        parent_id: str | None,
        category_id: str | None,
    ) -> None:
        existing = session.find_category_by_name(owner_id, name, parent_id)
        if existing is not None and existing.id != category_id:
            raise ValidationError(
                "A category with this name already exists at this level"
            )


__all__ = ["CategoriesUseCase"]
