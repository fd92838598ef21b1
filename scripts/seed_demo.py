#!/usr/bin/env python3
"""
Seed script to create demo users, categories and places
"""

import asyncio
from decimal import Decimal

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


CATEGORIES = [
    {"name": "Hotels", "description": "Rooms and lodging", "icon": "hotel", "color": "#1565c0"},
    {"name": "Tours", "description": "Guided excursions", "icon": "map", "color": "#2e7d32"},
    {"name": "Restaurants", "description": "Local cuisine", "icon": "restaurant", "color": "#ef6c00"},
]

PLACES = [
    {
        "code": "HTL001",
        "name": "Hotel Mirador del Valle",
        "category": "Hotels",
        "price": Decimal("120.00"),
        "capacity": 40,
        "location": "Av. Principal 123",
        "description": "Mountain-view hotel with breakfast included",
    },
    {
        "code": "EXP002",
        "name": "Volcano Sunrise Expedition",
        "category": "Tours",
        "price": Decimal("75.50"),
        "capacity": 12,
        "location": "Visitor Center, North Gate",
        "description": "Early morning guided hike",
    },
    {
        "code": "RST003",
        "name": "Casa del Sabor",
        "category": "Restaurants",
        "price": Decimal("25.00"),
        "capacity": None,
        "location": "Plaza Central 8",
        "description": "Traditional dishes, walk-ins welcome",
    },
]


async def seed_demo_data():
    """Seed demo data for development"""
    from sqlalchemy import select

    from tourism.database import SessionLocal, engine, Base
    from tourism.models import Category, Place, PlaceStatus, User, UserRole

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        # Check if demo data already exists
        result = await db.execute(select(User).where(User.email == "admin@tourism.local"))
        if result.scalar_one_or_none():
            print("Demo data already exists. Skipping...")
            return

        print("Creating users...")
        db.add(User(
            email="admin@tourism.local",
            hashed_password=pwd_context.hash("admin123"),
            full_name="Demo Administrator",
            role=UserRole.ADMINISTRATOR,
            is_active=True,
        ))
        db.add(User(
            email="client@tourism.local",
            hashed_password=pwd_context.hash("client123"),
            full_name="Demo Client",
            phone="+15550001111",
            role=UserRole.CLIENT,
            is_active=True,
        ))

        print("Creating categories...")
        categories = {}
        for data in CATEGORIES:
            category = Category(**data)
            db.add(category)
            categories[data["name"]] = category
        await db.flush()

        print("Creating places...")
        for data in PLACES:
            data = dict(data)
            category = categories[data.pop("category")]
            db.add(Place(category_id=category.id, status=PlaceStatus.AVAILABLE, **data))

        await db.commit()

        print(f"""
Demo data created successfully!

Users:
  Administrator:
    Email: admin@tourism.local
    Password: admin123

  Client:
    Email: client@tourism.local
    Password: client123

Categories: {len(CATEGORIES)} created
Places: {", ".join(p["code"] for p in PLACES)}
""")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
