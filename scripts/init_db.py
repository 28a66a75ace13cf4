#!/usr/bin/env python
"""
Database initialization script for PricePulse.
Run this script to create/reset the database, optionally with sample data.
"""

import os
import sys
from datetime import datetime, timedelta, timezone

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pricepulse.database import Database
from pricepulse.models import Product, ProductStore, Review


def init_database(db_path: str = "pricepulse.db", reset: bool = False):
    """
    Initialize the database.

    Args:
        db_path: Path to the database file
        reset: If True, delete existing database and create fresh
    """
    if reset and os.path.exists(db_path):
        print(f"Removing existing database: {db_path}")
        os.remove(db_path)

    print(f"Initializing database: {db_path}")
    db = Database(db_path)

    stats = db.get_stats()
    print("Database initialized successfully!")
    print(f"  - Products: {stats['total_products']}")
    print(f"  - Price history records: {stats['total_price_records']}")

    return db


SAMPLE_PRODUCTS = [
    {
        "product": Product(
            name="Wireless Noise Cancelling Headphones",
            description="Over-ear headphones with 30 hour battery life",
            category="Audio",
            current_price=7499.0,
            image_url="https://example.com/headphones.jpg",
            source_url="https://www.amazon.in/sample-headphones",
            store_name="Amazon",
        ),
        "prices": [8999, 8799, 8999, 8499, 8299, 7999, 7799, 7499],
        "stores": [("Amazon", 7499.0), ("Flipkart", 7699.0), ("Croma", 8199.0)],
        "reviews": [
            ("Asha", 5, "Excellent sound and the noise cancelling is superb."),
            ("Ravi", 4, "Comfortable for long flights, battery lasts forever."),
            ("Meera", 2, "Left ear cup started creaking after a month."),
        ],
    },
    {
        "product": Product(
            name="Bluetooth Speaker Mini",
            description="Pocket speaker with IPX7 water resistance",
            category="Audio",
            current_price=2999.0,
            image_url="https://example.com/speaker.jpg",
            source_url="https://www.flipkart.com/sample-speaker",
            store_name="Flipkart",
        ),
        "prices": [2499, 2499, 2599, 2699, 2799, 2899, 2999],
        "stores": [("Flipkart", 2999.0), ("Amazon", 3049.0)],
        "reviews": [
            ("Kiran", 3, "Decent for the size, bass is weak."),
        ],
    },
    {
        "product": Product(
            name="Smartphone Case Cover",
            description="Durable case with a matte finish",
            category="Accessories",
            current_price=299.0,
            image_url="https://example.com/case.jpg",
            source_url="https://www.amazon.in/sample-case",
            store_name="Amazon",
        ),
        "prices": [299, 299, 299, 299, 299],
        "stores": [("Amazon", 299.0)],
        "reviews": [],
    },
]


def add_sample_data(db: Database):
    """Add sample products with a daily price history and reviews."""
    print("\nAdding sample data...")
    start = datetime.now(timezone.utc) - timedelta(days=30)
    for sample in SAMPLE_PRODUCTS:
        product_id = db.add_product(sample["product"])
        for day, price in enumerate(sample["prices"]):
            recorded_at = (start + timedelta(days=day)).isoformat()
            db.add_price_point(product_id, float(price), recorded_at)
        for store_name, price in sample["stores"]:
            db.add_product_store(ProductStore(
                product_id=product_id,
                store_name=store_name,
                price=price,
                store_url=f"https://example.com/{store_name.lower()}/{product_id}",
            ))
        for user_name, rating, text in sample["reviews"]:
            db.add_review(Review(
                product_id=product_id,
                user_name=user_name,
                rating=rating,
                review_text=text,
            ))
        print(f"  - Added: {sample['product'].name} (ID: {product_id})")

    stats = db.get_stats()
    print("\nDatabase now has:")
    print(f"  - Products: {stats['total_products']}")
    print(f"  - Price history records: {stats['total_price_records']}")
    print(f"  - Reviews: {stats['total_reviews']}")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Initialize PricePulse database")
    parser.add_argument(
        "--reset", action="store_true", help="Reset database (delete and recreate)"
    )
    parser.add_argument(
        "--sample-data", action="store_true", help="Add sample data for testing"
    )
    parser.add_argument(
        "--db-path",
        default="pricepulse.db",
        help="Path to database file (default: pricepulse.db)",
    )

    args = parser.parse_args()

    db = init_database(args.db_path, args.reset)

    if args.sample_data:
        add_sample_data(db)

    print("\nDone!")
