"""
Database module for PricePulse
SQLite storage for products, price history, reviews, tracking and analyses.
"""
import sqlite3
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional, Any
from contextlib import contextmanager, nullcontext

from pricepulse.errors import AlreadyTrackedError
from pricepulse.models import (
    AnalysisResult,
    PricePoint,
    Product,
    ProductStore,
    Review,
    TrackingSubscription,
    UserPreference,
)

_SCHEMA = '''
CREATE TABLE IF NOT EXISTS products (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    description TEXT,
    category TEXT,
    current_price REAL NOT NULL DEFAULT 0,
    currency TEXT DEFAULT 'INR',
    image_url TEXT,
    source_url TEXT,
    store_name TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_products_category ON products(category);

CREATE TABLE IF NOT EXISTS price_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    product_id INTEGER NOT NULL REFERENCES products(id),
    price REAL NOT NULL,
    recorded_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_price_history_product
    ON price_history(product_id, recorded_at);

CREATE TABLE IF NOT EXISTS product_stores (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    product_id INTEGER NOT NULL REFERENCES products(id),
    store_name TEXT NOT NULL,
    price REAL NOT NULL,
    store_url TEXT NOT NULL,
    last_updated TEXT
);

CREATE TABLE IF NOT EXISTS product_reviews (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    product_id INTEGER NOT NULL REFERENCES products(id),
    user_name TEXT NOT NULL,
    rating INTEGER NOT NULL CHECK (rating >= 1 AND rating <= 5),
    review_text TEXT NOT NULL,
    helpful_count INTEGER DEFAULT 0,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_product_reviews_product
    ON product_reviews(product_id, created_at);

CREATE TABLE IF NOT EXISTS tracked_products (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    product_id INTEGER NOT NULL REFERENCES products(id),
    target_price REAL DEFAULT 0,
    notify_on_drop INTEGER DEFAULT 1,
    created_at TEXT NOT NULL,
    UNIQUE (user_id, product_id)
);

CREATE TABLE IF NOT EXISTS user_preferences (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    category TEXT NOT NULL,
    interest_score INTEGER DEFAULT 1,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE (user_id, category)
);

CREATE TABLE IF NOT EXISTS product_analysis (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    product_id INTEGER NOT NULL UNIQUE REFERENCES products(id),
    worth_buying_score INTEGER NOT NULL,
    tier TEXT NOT NULL,
    recommendation TEXT NOT NULL,
    analysis_summary TEXT,
    created_at TEXT NOT NULL
);
'''


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Database:
    """SQLite database handler for PricePulse entities."""

    def __init__(self, db_path: str = 'pricepulse.db'):
        """
        Initialize database connection.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = db_path
        self._local = threading.local()
        # An in-memory database exists per connection, so all threads share one
        self._shared_connection: Optional[sqlite3.Connection] = None
        self._shared_lock = threading.RLock()
        self._ensure_tables()

    @property
    def in_memory(self) -> bool:
        return self.db_path == ':memory:'

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute('PRAGMA foreign_keys = ON')
        return conn

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local database connection (shared for :memory:)."""
        if self.in_memory:
            with self._shared_lock:
                if self._shared_connection is None:
                    self._shared_connection = self._connect()
                return self._shared_connection
        if getattr(self._local, 'connection', None) is None:
            self._local.connection = self._connect()
        return self._local.connection

    @contextmanager
    def get_cursor(self):
        """Context manager for database cursor."""
        with (self._shared_lock if self.in_memory else nullcontext()):
            conn = self._get_connection()
            cursor = conn.cursor()
            try:
                yield cursor
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                cursor.close()

    def _ensure_tables(self) -> None:
        """Create database tables if they don't exist."""
        conn = self._get_connection()
        conn.executescript(_SCHEMA)
        conn.commit()

    def close(self) -> None:
        """Close this thread's connection (the shared one for :memory:)."""
        if self.in_memory:
            with self._shared_lock:
                if self._shared_connection is not None:
                    self._shared_connection.close()
                    self._shared_connection = None
            return
        conn = getattr(self._local, 'connection', None)
        if conn is not None:
            conn.close()
            self._local.connection = None

    # --- Products ---

    def add_product(self, product: Product) -> int:
        """
        Insert a product row. Used by the seeding script and tests; the
        API itself treats products as read-only.

        Returns:
            The product ID
        """
        now = _now()
        with self.get_cursor() as cursor:
            cursor.execute('''
                INSERT INTO products (
                    name, description, category, current_price, currency,
                    image_url, source_url, store_name, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ''', (
                product.name,
                product.description,
                product.category,
                product.current_price,
                product.currency,
                product.image_url,
                product.source_url,
                product.store_name,
                now,
                now,
            ))
            return cursor.lastrowid

    def get_product_by_id(self, product_id: int) -> Optional[Product]:
        """Get a product by its ID."""
        with self.get_cursor() as cursor:
            cursor.execute('SELECT * FROM products WHERE id = ?', (product_id,))
            row = cursor.fetchone()
            return Product.from_dict(dict(row)) if row else None

    def search_products(
        self,
        query: str = '',
        category: Optional[str] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Dict[str, Any]:
        """
        Browse products, optionally filtered by name and category.

        Returns:
            Dictionary with products and pagination metadata
        """
        offset = (page - 1) * per_page
        clauses = []
        params: List[Any] = []
        if query:
            clauses.append('name LIKE ?')
            params.append(f'%{query}%')
        if category:
            clauses.append('category = ?')
            params.append(category)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ''

        with self.get_cursor() as cursor:
            cursor.execute(f'SELECT COUNT(*) AS count FROM products {where}', params)
            total = cursor.fetchone()['count']

            cursor.execute(
                f'''
                SELECT * FROM products
                {where}
                ORDER BY name ASC, id ASC
                LIMIT ? OFFSET ?
                ''',
                params + [per_page, offset]
            )
            products = [Product.from_dict(dict(row)) for row in cursor.fetchall()]

        return {
            'products': products,
            'pagination': {
                'page': page,
                'per_page': per_page,
                'total': total,
                'total_pages': (total + per_page - 1) // per_page,
                'has_next': page * per_page < total,
                'has_prev': page > 1
            }
        }

    def get_similar_products(self, product: Product, limit: int = 4) -> List[Product]:
        """Products in the same category, excluding the product itself."""
        if not product.category:
            return []
        with self.get_cursor() as cursor:
            cursor.execute(
                '''
                SELECT * FROM products
                WHERE category = ? AND id != ?
                ORDER BY id ASC
                LIMIT ?
                ''',
                (product.category, product.id, limit)
            )
            return [Product.from_dict(dict(row)) for row in cursor.fetchall()]

    # --- Price history ---

    def add_price_point(self, product_id: int, price: float,
                        recorded_at: Optional[str] = None) -> int:
        """Append a price observation. History rows are never updated."""
        with self.get_cursor() as cursor:
            cursor.execute(
                'INSERT INTO price_history (product_id, price, recorded_at) VALUES (?, ?, ?)',
                (product_id, price, recorded_at or _now())
            )
            return cursor.lastrowid

    def get_price_history(self, product_id: int) -> List[PricePoint]:
        """Get price history for a product, oldest first."""
        with self.get_cursor() as cursor:
            cursor.execute(
                '''
                SELECT id, product_id, price, recorded_at
                FROM price_history
                WHERE product_id = ?
                ORDER BY recorded_at ASC, id ASC
                ''',
                (product_id,)
            )
            return [PricePoint.from_dict(dict(row)) for row in cursor.fetchall()]

    # --- Stores ---

    def add_product_store(self, store: ProductStore) -> int:
        with self.get_cursor() as cursor:
            cursor.execute(
                '''
                INSERT INTO product_stores (product_id, store_name, price, store_url, last_updated)
                VALUES (?, ?, ?, ?, ?)
                ''',
                (store.product_id, store.store_name, store.price, store.store_url, _now())
            )
            return cursor.lastrowid

    def get_product_stores(self, product_id: int) -> List[ProductStore]:
        """Store prices for a product, cheapest first."""
        with self.get_cursor() as cursor:
            cursor.execute(
                'SELECT * FROM product_stores WHERE product_id = ? ORDER BY price ASC',
                (product_id,)
            )
            return [ProductStore.from_dict(dict(row)) for row in cursor.fetchall()]

    # --- Reviews ---

    def add_review(self, review: Review) -> Review:
        """Insert a review and return it with its id and timestamp."""
        created_at = _now()
        with self.get_cursor() as cursor:
            cursor.execute(
                '''
                INSERT INTO product_reviews (
                    product_id, user_name, rating, review_text, helpful_count, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                ''',
                (review.product_id, review.user_name, review.rating,
                 review.review_text, review.helpful_count, created_at)
            )
            review.id = cursor.lastrowid
        review.created_at = created_at
        return review

    def get_reviews(self, product_id: int, limit: Optional[int] = None) -> List[Review]:
        """Reviews of a product, newest first."""
        sql = '''
            SELECT * FROM product_reviews
            WHERE product_id = ?
            ORDER BY created_at DESC, id DESC
        '''
        params: List[Any] = [product_id]
        if limit is not None:
            sql += ' LIMIT ?'
            params.append(limit)
        with self.get_cursor() as cursor:
            cursor.execute(sql, params)
            return [Review.from_dict(dict(row)) for row in cursor.fetchall()]

    # --- Tracking ---

    def add_tracking(self, subscription: TrackingSubscription) -> TrackingSubscription:
        """
        Insert a tracking subscription.

        Raises:
            AlreadyTrackedError: if the user already tracks the product
        """
        created_at = _now()
        try:
            with self.get_cursor() as cursor:
                cursor.execute(
                    '''
                    INSERT INTO tracked_products (
                        user_id, product_id, target_price, notify_on_drop, created_at
                    ) VALUES (?, ?, ?, ?, ?)
                    ''',
                    (subscription.user_id, subscription.product_id,
                     subscription.target_price, int(subscription.notify_on_drop),
                     created_at)
                )
                subscription.id = cursor.lastrowid
        except sqlite3.IntegrityError as e:
            if 'UNIQUE' in str(e):
                raise AlreadyTrackedError(subscription.user_id, subscription.product_id) from e
            raise
        subscription.created_at = created_at
        return subscription

    def delete_tracking(self, user_id: str, product_id: int) -> bool:
        """Remove a subscription. Returns False if there was none."""
        with self.get_cursor() as cursor:
            cursor.execute(
                'DELETE FROM tracked_products WHERE user_id = ? AND product_id = ?',
                (user_id, product_id)
            )
            return cursor.rowcount > 0

    def get_tracking(self, user_id: str, product_id: int) -> Optional[TrackingSubscription]:
        with self.get_cursor() as cursor:
            cursor.execute(
                'SELECT * FROM tracked_products WHERE user_id = ? AND product_id = ?',
                (user_id, product_id)
            )
            row = cursor.fetchone()
            return TrackingSubscription.from_dict(dict(row)) if row else None

    def get_tracked_products(self, user_id: str) -> List[Dict[str, Any]]:
        """Subscriptions of a user joined with product name and price."""
        with self.get_cursor() as cursor:
            cursor.execute(
                '''
                SELECT t.*, p.name AS product_name, p.current_price AS current_price
                FROM tracked_products t
                JOIN products p ON p.id = t.product_id
                WHERE t.user_id = ?
                ORDER BY t.created_at DESC, t.id DESC
                ''',
                (user_id,)
            )
            return [dict(row) for row in cursor.fetchall()]

    def upsert_preference(self, preference: UserPreference) -> None:
        """Record interest in a category, one row per (user, category)."""
        now = _now()
        with self.get_cursor() as cursor:
            cursor.execute(
                '''
                INSERT INTO user_preferences (user_id, category, interest_score, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (user_id, category) DO UPDATE SET
                    interest_score = excluded.interest_score,
                    updated_at = excluded.updated_at
                ''',
                (preference.user_id, preference.category, preference.interest_score, now, now)
            )

    def get_preferences(self, user_id: str) -> List[UserPreference]:
        with self.get_cursor() as cursor:
            cursor.execute(
                'SELECT user_id, category, interest_score FROM user_preferences WHERE user_id = ?',
                (user_id,)
            )
            return [UserPreference.from_dict(dict(row)) for row in cursor.fetchall()]

    # --- Analysis ---

    def upsert_analysis(self, result: AnalysisResult) -> AnalysisResult:
        """Store the analysis for a product, replacing any previous one."""
        created_at = _now()
        with self.get_cursor() as cursor:
            cursor.execute(
                '''
                INSERT INTO product_analysis (
                    product_id, worth_buying_score, tier, recommendation,
                    analysis_summary, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT (product_id) DO UPDATE SET
                    worth_buying_score = excluded.worth_buying_score,
                    tier = excluded.tier,
                    recommendation = excluded.recommendation,
                    analysis_summary = excluded.analysis_summary,
                    created_at = excluded.created_at
                ''',
                (result.product_id, result.worth_buying_score, result.tier,
                 result.recommendation, result.analysis_summary, created_at)
            )
        result.created_at = created_at
        return result

    def get_analysis(self, product_id: int) -> Optional[AnalysisResult]:
        with self.get_cursor() as cursor:
            cursor.execute(
                'SELECT * FROM product_analysis WHERE product_id = ?',
                (product_id,)
            )
            row = cursor.fetchone()
            return AnalysisResult.from_dict(dict(row)) if row else None

    def get_stats(self) -> Dict[str, int]:
        """Row counts per table."""
        tables = {
            'total_products': 'products',
            'total_price_records': 'price_history',
            'total_reviews': 'product_reviews',
            'total_tracked': 'tracked_products',
            'total_analyses': 'product_analysis',
        }
        stats = {}
        with self.get_cursor() as cursor:
            for key, table in tables.items():
                cursor.execute(f'SELECT COUNT(*) AS count FROM {table}')
                stats[key] = cursor.fetchone()['count']
        return stats


def db_path_from_url(db_url: str) -> str:
    """Extract the file path from a ``sqlite:///`` URL."""
    if db_url.startswith('sqlite:///'):
        return db_url[10:]
    return 'pricepulse.db'


def get_db() -> Database:
    """Get or create the database instance of the current app."""
    from flask import current_app
    db = current_app.extensions.get('pricepulse_db')
    if db is None:
        db_url = current_app.config.get('DATABASE_URL', 'sqlite:///pricepulse.db')
        db = Database(db_path_from_url(db_url))
        current_app.extensions['pricepulse_db'] = db
    return db
