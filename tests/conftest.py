"""Shared fixtures: an app on a temporary database and a fake classifier."""

import pytest

from pricepulse import create_app
from pricepulse.analysis.sentiment import SentimentAnalyzer
from pricepulse.config import TestingConfig
from pricepulse.database import get_db
from pricepulse.models import Product, ProductStore, Review

FAKE_LABELS = {
    "great": ("5 stars", 1.0),
    "good": ("4 stars", 0.8),
    "okay": ("3 stars", 0.9),
    "bad": ("1 star", 1.0),
    "poor": ("2 stars", 0.6),
}


class FakeClassifier:
    """Stands in for a transformers pipeline; labels texts by keyword."""

    def __init__(self):
        self.calls = []

    def _classify(self, text):
        for keyword, (label, score) in FAKE_LABELS.items():
            if keyword in text.lower():
                return {"label": label, "score": score}
        return {"label": "3 stars", "score": 0.5}

    def __call__(self, inputs):
        self.calls.append(inputs)
        if isinstance(inputs, str):
            return [self._classify(inputs)]
        return [self._classify(text) for text in inputs]


@pytest.fixture
def fake_classifier():
    return FakeClassifier()


@pytest.fixture
def fake_analyzer(fake_classifier):
    return SentimentAnalyzer("fake-model", loader=lambda name: fake_classifier)


@pytest.fixture
def app(tmp_path, fake_analyzer):
    class Config(TestingConfig):
        DATABASE_URL = f"sqlite:///{tmp_path / 'pricepulse_test.db'}"

    app = create_app(Config)
    app.extensions["sentiment_analyzer"] = fake_analyzer
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    with app.app_context():
        yield get_db()


@pytest.fixture
def sample_product(db):
    """A product with a falling price history, two stores and three reviews."""
    product_id = db.add_product(Product(
        name="Wireless Headphones",
        category="Audio",
        current_price=80.0,
        store_name="Amazon",
    ))
    for day, price in enumerate([100.0, 95.0, 90.0, 85.0, 80.0]):
        db.add_price_point(product_id, price, f"2025-01-{day + 1:02d}T00:00:00+00:00")
    db.add_product_store(ProductStore(product_id=product_id, store_name="Croma",
                                      price=85.0, store_url="https://croma.example"))
    db.add_product_store(ProductStore(product_id=product_id, store_name="Amazon",
                                      price=80.0, store_url="https://amazon.example"))
    for name, rating, text in [
        ("Asha", 5, "Great sound"),
        ("Ravi", 4, "Good battery"),
        ("Meera", 5, "Great comfort"),
    ]:
        db.add_review(Review(product_id=product_id, user_name=name,
                             rating=rating, review_text=text))
    return product_id
