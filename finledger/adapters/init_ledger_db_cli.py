"""CLI adapter creating the ledger tables.

The schema is created idempotently on the database configured through
``LEDGER_DB_URL``; existing tables are left untouched.
"""

from finledger.infrastructure.container import build_database_adapter
from finledger.infrastructure.logging.logger import get_app_logger
from finledger.infrastructure.schema import create_schema, metadata


def main() -> None:
    """Create every missing ledger table."""
    logger = get_app_logger()
    db_adapter = build_database_adapter()
    engine = db_adapter.get_ledger_engine()

    create_schema(engine)

    logger.info(f"Ledger schema ensured on {engine.url}")
    print(f"Ledger schema ready ({len(metadata.tables)} tables).")


if __name__ == "__main__":  # pragma: no cover
    main()
