"""Create the users and tasks tables (and their indexes) in DATABASE_URL.

Usage:
    python -m task_api.migrate
"""
import sys

from sqlalchemy.exc import SQLAlchemyError

from task_api.core import config
from task_api.database import build_engine, init_schema


def main() -> None:
    engine = build_engine(config.DATABASE_URL)
    try:
        init_schema(engine)
    except SQLAlchemyError as exc:
        print("Migration failed:", exc, file=sys.stderr)
        sys.exit(1)
    finally:
        engine.dispose()
    print("Migration completed successfully.")


if __name__ == "__main__":
    main()
