"""Create the genflow task table in the configured database."""

from src.genflow.core.config import AppConfig
from src.genflow.db.db_init import create_db_engine, init_db


def main() -> None:
    config = AppConfig.build_default()
    init_db(create_db_engine(config.database_url))
    print(f"Database initialized at {config.database_url}.")


if __name__ == "__main__":
    main()
