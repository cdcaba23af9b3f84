import pytest
from unittest.mock import Mock, MagicMock
from fastapi.testclient import TestClient

from main import app
from app.database import get_db
from app.integrations.woocommerce import WooCommerceClient, OrderPage, get_woocommerce_client


@pytest.fixture
def mock_db():
    """Mock database session"""
    db = MagicMock()
    db.query.return_value = db
    db.filter.return_value = db
    db.options.return_value = db
    db.order_by.return_value = db
    db.offset.return_value = db
    db.limit.return_value = db
    db.with_for_update.return_value = db
    db.first.return_value = None
    db.all.return_value = []
    db.count.return_value = 0
    return db


@pytest.fixture
def mock_woo():
    """WooCommerce client double: no orders, no customers"""
    woo = Mock(spec=WooCommerceClient)
    woo.list_orders.return_value = OrderPage(orders=[], total=0, total_pages=0)
    woo.search_orders.return_value = []
    woo.recent_orders.return_value = []
    woo.find_customers_by_email.return_value = []
    woo.count.return_value = 0
    return woo


@pytest.fixture
def client(mock_db, mock_woo):
    """TestClient with mocked DB and WooCommerce"""
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_woocommerce_client] = lambda: mock_woo
    test_client = TestClient(app)
    yield test_client, mock_db, mock_woo
    app.dependency_overrides.clear()
