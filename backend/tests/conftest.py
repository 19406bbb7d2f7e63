import os
import sys

# Add the parent directory (backend) to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
import sqlite3
import tempfile
from fastapi.testclient import TestClient

from core.chart_pipeline import ChartPipeline
from core.db_connector import create_engine_from_url
from core.schema_cache import SchemaCache
from core.schema_introspector import SchemaIntrospector
from fakes import FakeGenerationClient
from main import app

DDL = [
    """CREATE TABLE users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name VARCHAR(100) NOT NULL,
        email VARCHAR(100) UNIQUE NOT NULL,
        age INTEGER,
        country VARCHAR(100),
        sign_up_date DATE NOT NULL,
        is_active BOOLEAN DEFAULT 1
    )""",
    """CREATE TABLE products (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name VARCHAR(200) NOT NULL,
        category VARCHAR(100) NOT NULL,
        price DECIMAL(10, 2) NOT NULL,
        stock_quantity INTEGER NOT NULL DEFAULT 0
    )""",
    """CREATE TABLE sales (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL REFERENCES users(id),
        product_name VARCHAR(200) NOT NULL,
        category VARCHAR(100) NOT NULL,
        amount DECIMAL(10, 2) NOT NULL,
        quantity INTEGER NOT NULL DEFAULT 1,
        sale_date DATE NOT NULL,
        region VARCHAR(100)
    )""",
]

USERS = [
    ("Alice", "alice@example.com", 34, "USA", "2023-05-01"),
    ("Bob", "bob@example.com", 27, "UK", "2023-07-12"),
    ("Chandra", "chandra@example.com", 41, "India", "2024-01-03"),
]

PRODUCTS = [
    ("Laptop", "Electronics", 1200.00, 10),
    ("T-Shirt", "Clothing", 12.75, 200),
    ("Novel", "Books", 5.00, 50),
]

SALES = [
    (1, "Laptop", "Electronics", 1200.00, 1, "2024-01-15", "North"),
    (2, "T-Shirt", "Clothing", 25.50, 2, "2024-01-20", "South"),
    (1, "Phone", "Electronics", 800.00, 1, "2024-02-03", "East"),
    (3, "Novel", "Books", 15.00, 3, "2024-02-14", "West"),
    (2, "Jeans", "Clothing", 60.00, 1, "2024-03-01", "North"),
]


@pytest.fixture
def temp_sqlite_db():
    fd, path = tempfile.mkstemp(suffix=".db")
    try:
        conn = sqlite3.connect(path)
        cur = conn.cursor()
        for stmt in DDL:
            cur.execute(stmt)
        cur.executemany(
            "INSERT INTO users (name, email, age, country, sign_up_date) VALUES (?, ?, ?, ?, ?)", USERS)
        cur.executemany(
            "INSERT INTO products (name, category, price, stock_quantity) VALUES (?, ?, ?, ?)", PRODUCTS)
        cur.executemany(
            "INSERT INTO sales (user_id, product_name, category, amount, quantity, sale_date, region) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)", SALES)
        conn.commit()
        conn.close()
        yield path
    finally:
        os.close(fd)
        os.remove(path)


@pytest.fixture
def engine(temp_sqlite_db):
    eng = create_engine_from_url(f"sqlite:///{temp_sqlite_db}")
    yield eng
    eng.dispose()


@pytest.fixture
def introspector(engine):
    return SchemaIntrospector(engine, excluded_tables=["alembic_version"])


@pytest.fixture
def schema(introspector):
    return introspector.discover()


@pytest.fixture
def fake_client():
    return FakeGenerationClient()


@pytest.fixture
def pipeline(engine, introspector, fake_client):
    return ChartPipeline(
        engine=engine,
        introspector=introspector,
        schema_cache=SchemaCache(introspector.discover),
        client=fake_client,
        timeout_ms=5_000,
        max_rows=1_000,
    )


@pytest.fixture
def client(pipeline):
    app.state.pipeline = pipeline
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.state.pipeline = None
