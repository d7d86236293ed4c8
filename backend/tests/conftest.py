"""
Pytest fixtures and configuration for Unified Catalog tests

This file provides shared fixtures that can be used across all test modules.
Unit tests mock psycopg2 connections; integration tests need DATABASE_URL.
"""
import os
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import psycopg2
import pytest
from dotenv import load_dotenv
from jose import jwt
from psycopg2.extras import RealDictCursor

from unified_catalog.core.config import settings
from unified_catalog.domain.product import Product
from unified_catalog.domain.product_type import ProductType, parse_specification_field
from unified_catalog.domain.variant import Variant

# Load environment variables for tests
load_dotenv()

TEST_AUTH_SECRET = "test-secret"


# Database (integration)

@pytest.fixture(scope="session")
def database_url():
    """
    Provides the database URL for tests

    Scope: session (created once per test session)
    """
    url = os.getenv("DATABASE_URL")
    if not url:
        pytest.skip("DATABASE_URL not configured")
    return url


@pytest.fixture(scope="function")
def db_cursor(database_url):
    """
    Provides a RealDictCursor on a fresh connection for each test

    Automatically closes cursor and connection after the test
    """
    conn = psycopg2.connect(database_url)
    cursor = conn.cursor(cursor_factory=RealDictCursor)
    yield cursor
    cursor.close()
    conn.close()


# Mocked database (unit)

@pytest.fixture
def mock_cursor():
    return MagicMock()


@pytest.fixture
def mock_conn(mock_cursor):
    """MagicMock connection whose cursor() returns mock_cursor"""
    conn = MagicMock()
    conn.cursor.return_value = mock_cursor
    return conn


@pytest.fixture
def fake_transaction(mock_conn):
    """
    Drop-in replacement for core.database.transaction / read_connection

    Records whether the block committed or rolled back on mock_conn.
    """
    @contextmanager
    def _transaction():
        try:
            yield mock_conn
            mock_conn.commit()
        except Exception:
            mock_conn.rollback()
            raise

    return _transaction


# Domain samples

@pytest.fixture
def iphone_type_row():
    """product_types row for the iPhone type"""
    return {
        'id': 1,
        'name': 'iPhone',
        'slug': 'iphone',
        'description': 'Apple Smartphones',
        'icon': 'iphone',
        'specification_fields': [
            {'name': 'chip', 'label': 'Chip', 'type': 'text', 'required': True},
            {'name': 'storage', 'label': 'Storage', 'type': 'select', 'required': True,
             'options': ['128GB', '256GB', '512GB', '1TB']},
            {'name': 'screen_size', 'label': 'Screen Size', 'type': 'number', 'required': False},
            {'name': 'colors', 'label': 'Colors', 'type': 'multiselect', 'required': False,
             'options': ['Black', 'White', 'Blue']},
            {'name': 'notes', 'label': 'Notes', 'type': 'textarea', 'required': False},
        ],
        'status': 'ACTIVE',
        'display_order': 0,
        'created_by': 'admin-1',
        'updated_by': 'admin-1',
        'created_at': datetime(2025, 1, 1),
        'updated_at': None,
    }


@pytest.fixture
def iphone_type(iphone_type_row):
    row = dict(iphone_type_row)
    row['specification_fields'] = [parse_specification_field(f) for f in row['specification_fields']]
    return ProductType(**row)


@pytest.fixture
def valid_specifications():
    return {'chip': 'A17 Pro', 'storage': '256GB', 'screen_size': 6.7}


@pytest.fixture
def product_row():
    """products row for an iPhone 15 Pro Max"""
    return {
        'id': 10,
        'name': 'iPhone 15 Pro Max',
        'model': 'iPhone 15 Pro Max',
        'slug': 'iphone-15-pro-max',
        'base_slug': 'iphone-15-pro-max',
        'description': '',
        'product_type_id': 1,
        'specifications': {'chip': 'A17 Pro', 'storage': '256GB'},
        'condition': 'NEW',
        'brand': 'Apple',
        'status': 'AVAILABLE',
        'installment_badge': 'NONE',
        'featured_images': [],
        'video_url': '',
        'created_by': 'staff-1',
        'updated_by': 'staff-1',
        'created_at': datetime(2025, 1, 2),
        'updated_at': None,
    }


@pytest.fixture
def variant_row():
    """product_variants row factory"""
    def _row(**overrides):
        row = {
            'id': 100,
            'product_id': 10,
            'position': 0,
            'color': 'Black',
            'version_name': '256GB',
            'original_price': Decimal('34990000'),
            'price': Decimal('33990000'),
            'stock': 50,
            'images': ['black-front.jpg'],
            'sku': '00000201',
            'slug': 'iphone-15-pro-max-256gb',
            'sales_count': 0,
            'view_count': 0,
            'legacy_fields': {},
            'created_at': datetime(2025, 1, 2),
            'updated_at': None,
        }
        row.update(overrides)
        return row

    return _row


@pytest.fixture
def make_variant(variant_row):
    def _variant(**overrides):
        return Variant(**variant_row(**overrides))

    return _variant


@pytest.fixture
def make_product(product_row):
    def _product(variants=None, **overrides):
        row = dict(product_row)
        row.update(overrides)
        product = Product(**row)
        product.variants = list(variants or [])
        return product

    return _product


@pytest.fixture
def create_payload():
    """Product creation request body with one color group and two versions"""
    return {
        'name': 'iPhone 15 Pro Max',
        'model': 'iPhone 15 Pro Max',
        'product_type_id': 1,
        'specifications': {'chip': 'A17 Pro', 'storage': '256GB'},
        'variants': [
            {
                'color': 'Black',
                'images': ['black-front.jpg', ' '],
                'options': [
                    {'version_name': '256GB', 'original_price': 34990000, 'price': 33990000, 'stock': 50},
                    {'version_name': '512GB', 'original_price': 40990000, 'price': 39990000, 'stock': 0},
                ],
            },
        ],
    }


# Auth

@pytest.fixture(autouse=True)
def auth_secret(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_SECRET", TEST_AUTH_SECRET)
    return TEST_AUTH_SECRET


@pytest.fixture
def make_token():
    """Build a signed HS256 bearer token for a role"""
    def _token(role="admin", user_id="user-1", expires_in=timedelta(hours=1)):
        payload = {
            "sub": user_id,
            "email": f"{user_id}@store.vn",
            "role": role,
            "exp": datetime.now(timezone.utc) + expires_in,
        }
        return jwt.encode(payload, TEST_AUTH_SECRET, algorithm="HS256")

    return _token


@pytest.fixture
def auth_headers(make_token):
    def _headers(role="admin", user_id="user-1"):
        return {"Authorization": f"Bearer {make_token(role=role, user_id=user_id)}"}

    return _headers


@pytest.fixture
def client():
    """FastAPI TestClient for the catalog app"""
    from fastapi.testclient import TestClient
    from unified_catalog.main import app

    return TestClient(app)
