import argparse
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from .database import Base, SessionLocal, engine, init_db
from .models import Category

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    "Books",
    "Clothing",
    "Electronics",
    "Furniture",
    "Home & Kitchen",
    "Sports",
    "Stationery",
    "Vehicles",
    "Others",
]


def reset_db():
    # Drops & recreates all tables
    Base.metadata.drop_all(bind=engine)
    init_db()


def seed_categories(db: Session, names=DEFAULT_CATEGORIES) -> int:
    """Insert the categories that don't exist yet. Returns how many were added."""
    existing = set(db.scalars(select(Category.name)))
    missing = [name for name in names if name not in existing]
    for name in missing:
        db.add(Category(name=name))
    db.commit()
    if missing:
        logger.info(f"Seeded {len(missing)} categories: {', '.join(missing)}")
    return len(missing)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Seed the marketplace database")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables first")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if args.reset:
        reset_db()
    else:
        init_db()

    with SessionLocal() as db:
        added = seed_categories(db)
    print(f"Added {added} categories")


if __name__ == "__main__":
    main()
