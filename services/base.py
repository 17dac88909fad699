"""Base services container for dependency injection."""

from config import Config
from db.manager import DatabaseManager
from db.snapshots import CATEGORIES_KEY, TRANSACTIONS_KEY, SnapshotRepository


class Services:
    """Container for the category and transaction stores.

    Both stores are built here and passed to whoever needs them; nothing else
    holds a module-level store instance.

    Args:
        config: Application configuration object.
        db_manager: Optional database manager for testing. If provided, it is
            used instead of one built from config.
    """

    def __init__(self, config: Config, db_manager=None):
        self.config = config
        self.db_manager = db_manager or DatabaseManager(config)

        # Lazy import to avoid circular dependencies
        from services.categories import CategoryService
        from services.transactions import TransactionService

        self.categories = CategoryService(
            SnapshotRepository(self.db_manager, CATEGORIES_KEY),
            seed_defaults=config.seed_default_categories,
        )
        self.transactions = TransactionService(
            SnapshotRepository(self.db_manager, TRANSACTIONS_KEY)
        )

    def reset(self) -> None:
        """Delete both stored snapshots and empty both stores."""
        self.transactions.reset()
        self.categories.reset()
