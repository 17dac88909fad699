"""Category service: the taxonomy, its uniqueness rule and its ordering."""

from dataclasses import replace
from typing import Dict, List, Optional

from errors import DuplicateCategoryError, PersistenceError, ValidationError
from interchange.fields import clean_label
from logger import get_logger
from models.category import Category, Kind

logger = get_logger("services.categories")

DEFAULT_CATEGORIES = [
    Category(Kind.INCOME, "급여", "정기급여", "월급"),
    Category(Kind.INCOME, "급여", "정기급여", "상여금"),
    Category(Kind.INCOME, "금융소득", "이자수입", "예금이자"),
    Category(Kind.INCOME, "금융소득", "배당수입", "주식배당"),
    Category(Kind.EXPENSE, "식비", "식사비", "주식"),
    Category(Kind.EXPENSE, "식비", "식사비", "부식"),
    Category(Kind.EXPENSE, "주거비", "공과금", "전기세"),
    Category(Kind.EXPENSE, "주거비", "공과금", "수도세"),
    Category(Kind.EXPENSE, "교통비", "대중교통", "버스"),
    Category(Kind.EXPENSE, "교통비", "대중교통", "지하철"),
]


class CategoryService:
    """Service for managing the category taxonomy.

    Categories have no surrogate key: a category is its (kind, 관, 항, 목)
    tuple, and every lookup matches on all four fields. The list order is
    meaningful, since it defines the display order of the 관 groups.

    Args:
        repository: Snapshot repository providing load/save/delete/exists.
        seed_defaults: Start from DEFAULT_CATEGORIES when nothing is stored yet.
    """

    def __init__(self, repository, seed_defaults: bool = False):
        self.repository = repository
        self.seed_defaults = seed_defaults
        self._categories: List[Category] = []
        self.load()

    def load(self) -> None:
        """Replace the in-memory taxonomy with the stored snapshot.

        A snapshot that cannot be read is logged and treated as empty, so the
        service stays usable for the session.

        Defaults are seeded only when no snapshot exists at all. A stored empty
        list loads as an empty taxonomy.
        """
        try:
            if self.seed_defaults and not self.repository.exists():
                logger.debug("No stored categories, starting from defaults")
                self._categories = list(DEFAULT_CATEGORIES)
                return
            records = self.repository.load()
        except PersistenceError as e:
            logger.error(f"Failed to load categories: {e}")
            self._categories = []
            return

        categories = []
        for record in records:
            try:
                categories.append(Category.from_dict(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping stored category {record!r}: {e}")
        self._categories = categories

    def find_all(self) -> List[Category]:
        """Get all categories in taxonomy order."""
        return list(self._categories)

    def find_by_kind(self, kind: Kind) -> List[Category]:
        return [c for c in self._categories if c.kind == kind]

    def exists(self, category: Category) -> bool:
        return self._lookup_key(category) in self._categories

    def level1_order(self, kind: Kind) -> List[str]:
        """Get the distinct 관 labels of a kind in first-seen order."""
        order = []
        for category in self._categories:
            if category.kind == kind and category.level1 not in order:
                order.append(category.level1)
        return order

    def tree(self, kind: Kind) -> Dict[str, Dict[str, List[str]]]:
        """Group one kind's categories as {관: {항: [목, ...]}} in taxonomy order."""
        grouped: Dict[str, Dict[str, List[str]]] = {}
        for category in self.find_by_kind(kind):
            grouped.setdefault(category.level1, {}).setdefault(
                category.level2, []
            ).append(category.level3)
        return grouped

    def is_duplicate(
        self, candidate: Category, editing: Optional[Category] = None
    ) -> bool:
        """Check whether ``candidate`` collides with a stored category.

        Args:
            candidate: Category about to be added or saved.
            editing: The category being edited, which is not a collision.
        """
        candidate = self._lookup_key(candidate)
        if editing is not None:
            editing = self._lookup_key(editing)
        return any(
            category == candidate and category != editing
            for category in self._categories
        )

    def validate(
        self, candidate: Category, editing: Optional[Category] = None
    ) -> Category:
        """Check that a category is well-formed and not a duplicate.

        Returns:
            The candidate with kind parsed and labels trimmed.

        Raises:
            ValidationError: If the kind is invalid or a label is blank.
            DuplicateCategoryError: If the same tuple is already stored.
        """
        category = self._well_formed(candidate)
        if self.is_duplicate(category, editing):
            raise DuplicateCategoryError(
                f"Category already exists: {_describe(category)}"
            )
        return category

    def add(self, category: Category) -> Category:
        """Append a new category.

        Returns:
            The stored (trimmed) category.

        Raises:
            ValidationError: If the category is malformed.
            DuplicateCategoryError: If it already exists.
            PersistenceError: If the write-through fails. The category stays
                added in memory.
        """
        category = self.validate(category)
        self._categories.append(category)
        logger.info(f"Added category {_describe(category)}")
        self._persist()
        return category

    def update(self, old: Category, new: Category) -> bool:
        """Replace the first category equal to ``old`` with ``new``.

        ``new`` is not checked for duplicates; call validate(new, editing=old)
        first.

        Returns:
            True if a category was replaced, False if ``old`` was not found.
        """
        new = self._well_formed(new)
        old = self._lookup_key(old)
        try:
            index = self._categories.index(old)
        except ValueError:
            logger.warning(f"Category to update not found: {_describe(old)}")
            return False

        self._categories[index] = new
        logger.info(f"Updated category {_describe(old)} -> {_describe(new)}")
        self._persist()
        return True

    def delete(self, category: Category) -> int:
        """Remove every category equal to ``category``.

        Transactions filed under it are left untouched.

        Returns:
            Number of categories removed.
        """
        category = self._lookup_key(category)
        before = len(self._categories)
        self._categories = [c for c in self._categories if c != category]
        removed = before - len(self._categories)
        logger.info(f"Deleted category {_describe(category)} ({removed} removed)")
        self._persist()
        return removed

    def move_up(self, level1: str, kind: Kind) -> bool:
        """Move a 관 group one position earlier. No-op for the first group."""
        return self._swap_level1(level1, kind, -1)

    def move_down(self, level1: str, kind: Kind) -> bool:
        """Move a 관 group one position later. No-op for the last group."""
        return self._swap_level1(level1, kind, 1)

    def replace_all(self, categories: List[Category]) -> int:
        """Replace the whole taxonomy, keeping the first of any duplicate tuples.

        Returns:
            Number of categories stored.
        """
        unique: List[Category] = []
        for category in categories:
            category = self._well_formed(category)
            if category not in unique:
                unique.append(category)

        skipped = len(categories) - len(unique)
        if skipped:
            logger.warning(f"Dropped {skipped} duplicate categories")

        self._categories = unique
        logger.info(f"Replaced taxonomy with {len(unique)} categories")
        self._persist()
        return len(unique)

    def reset(self) -> None:
        """Forget every category and delete the stored snapshot."""
        self._categories = []
        try:
            self.repository.delete()
        except PersistenceError as e:
            logger.error(f"Failed to delete category snapshot: {e}")
            raise
        logger.info("Category snapshot deleted")

    def _swap_level1(self, level1: str, kind: Kind, offset: int) -> bool:
        """Swap a 관 label with its neighbour across every category of ``kind``.

        Every category carrying either label is relabeled, so the 항/목 entries
        under both groups change groups along with the labels.
        """
        level1 = level1.strip()
        order = self.level1_order(kind)
        if level1 not in order:
            return False

        neighbour_index = order.index(level1) + offset
        if not 0 <= neighbour_index < len(order):
            return False
        neighbour = order[neighbour_index]

        swapped = []
        for category in self._categories:
            if category.kind == kind and category.level1 == level1:
                category = replace(category, level1=neighbour)
            elif category.kind == kind and category.level1 == neighbour:
                category = replace(category, level1=level1)
            swapped.append(category)

        self._categories = swapped
        logger.info(f"Swapped {kind.value} groups '{level1}' and '{neighbour}'")
        self._persist()
        return True

    def _well_formed(self, candidate: Category) -> Category:
        try:
            kind = Kind.parse(candidate.kind)
        except ValueError as exc:
            raise ValidationError('유형 must be "수입" or "지출"') from exc

        return Category(
            kind=kind,
            level1=clean_label(candidate.level1, "관"),
            level2=clean_label(candidate.level2, "항"),
            level3=clean_label(candidate.level3, "목"),
        )

    def _lookup_key(self, category: Category) -> Category:
        """Normalize a category for matching against stored entries.

        Malformed input cannot match a stored (well-formed) category, so it is
        returned unchanged.
        """
        try:
            return self._well_formed(category)
        except ValidationError:
            return category

    def _persist(self) -> None:
        try:
            self.repository.save([c.to_dict() for c in self._categories])
        except PersistenceError as e:
            logger.error(f"Failed to save categories: {e}")
            raise


def _describe(category: Category) -> str:
    return "/".join(
        [getattr(category.kind, "value", str(category.kind)), *category.path]
    )
