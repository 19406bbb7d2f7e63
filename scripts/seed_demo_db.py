#!/usr/bin/env python3
"""
Seed a local SQLite database with demo data for PromptChart development.
Usage (from the repository root):
    python scripts/seed_demo_db.py
Creates: backend/promptchart.db  (point DATABASE_URL at it, the default when run from backend/)
"""
import sqlite3
import random
from datetime import date, datetime, timedelta
from pathlib import Path

DB_PATH = Path(__file__).parent.parent / "backend" / "promptchart.db"

DDL = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id                INTEGER PRIMARY KEY AUTOINCREMENT,
        name              VARCHAR(100) NOT NULL,
        email             VARCHAR(100) UNIQUE NOT NULL,
        age               INTEGER,
        city              VARCHAR(100),
        country           VARCHAR(100),
        sign_up_date      DATE NOT NULL,
        subscription_tier VARCHAR(50),
        created_at        TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at        TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",
    """
    CREATE TABLE IF NOT EXISTS products (
        id             INTEGER PRIMARY KEY AUTOINCREMENT,
        name           VARCHAR(200) UNIQUE NOT NULL,
        category       VARCHAR(100) NOT NULL,
        price          DECIMAL(10, 2) NOT NULL,
        stock_quantity INTEGER NOT NULL DEFAULT 0,
        supplier       VARCHAR(100),
        created_at     TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",
    """
    CREATE TABLE IF NOT EXISTS sales (
        id           INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id      INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        product_name VARCHAR(200) NOT NULL,
        category     VARCHAR(100) NOT NULL,
        amount       DECIMAL(10, 2) NOT NULL,
        quantity     INTEGER NOT NULL DEFAULT 1,
        sale_date    DATE NOT NULL,
        region       VARCHAR(100),
        created_at   TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",
]

CATEGORIES = ['Electronics', 'Clothing', 'Books', 'Home & Garden', 'Sports']
REGIONS    = ['North', 'South', 'East', 'West', 'Central']
COUNTRIES  = {
    'USA':     ['New York', 'Chicago', 'Austin'],
    'UK':      ['London', 'Manchester'],
    'Germany': ['Berlin', 'Munich'],
    'India':   ['Bengaluru', 'Mumbai', 'Delhi'],
    'Japan':   ['Tokyo', 'Osaka'],
}
TIERS      = ['free', 'basic', 'premium', 'enterprise']
SUPPLIERS  = ['Acme Corp', 'Globex', 'Initech', 'Umbrella', 'Stark Industries']


def seed():
    conn = sqlite3.connect(DB_PATH)
    cur  = conn.cursor()

    for stmt in DDL:
        cur.execute(stmt)

    # users (200)
    for i in range(1, 201):
        country = random.choice(list(COUNTRIES))
        cur.execute(
            "INSERT OR IGNORE INTO users(name,email,age,city,country,sign_up_date,subscription_tier,created_at) "
            "VALUES (?,?,?,?,?,?,?,?)",
            (f"User {i}", f"user{i}@example.com", random.randint(18, 70),
             random.choice(COUNTRIES[country]), country,
             (date.today() - timedelta(days=random.randint(0, 730))).isoformat(),
             random.choice(TIERS), datetime.now().isoformat(sep=" ")))

    # products (50)
    products = []
    for i in range(1, 51):
        category = random.choice(CATEGORIES)
        products.append((f"Product {i}", category))
        cur.execute(
            "INSERT OR IGNORE INTO products(name,category,price,stock_quantity,supplier) VALUES (?,?,?,?,?)",
            (f"Product {i}", category, round(random.uniform(5, 500), 2),
             random.randint(0, 1000), random.choice(SUPPLIERS)))

    # sales (2000, spread over the last year)
    for _ in range(2000):
        name, category = random.choice(products)
        qty = random.randint(1, 5)
        cur.execute(
            "INSERT INTO sales(user_id,product_name,category,amount,quantity,sale_date,region) VALUES (?,?,?,?,?,?,?)",
            (random.randint(1, 200), name, category, round(qty * random.uniform(5, 500), 2), qty,
             (date.today() - timedelta(days=random.randint(0, 365))).isoformat(),
             random.choice(REGIONS)))

    conn.commit()
    conn.close()
    print(f"Demo database seeded: {DB_PATH}")
    print("   Tables: users, products, sales")

if __name__ == "__main__":
    seed()
