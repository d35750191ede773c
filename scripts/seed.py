# scripts/seed.py
"""
Seed the shop deployment: an admin account plus the demo catalogue.

    python -m scripts.seed

Existing products are replaced; an existing admin is left alone.
"""
import asyncio
import logging

from crudsuite.core.config import Deployment, settings
from crudsuite.core.security import Role
from crudsuite.db.mongo import close_db, ensure_indexes, select_database
from crudsuite.repositories import products as products_repo
from crudsuite.repositories import users as users_repo
from crudsuite.services.auth import hash_password

logger = logging.getLogger("seed")

ADMIN = {"name": "Admin", "email": "admin@atelier.com", "password": "admin123"}


def _img(photo: str) -> str:
    return f"https://images.unsplash.com/photo-{photo}?w=400&h=400&fit=crop"


CATALOGUE = [
    {"name": "Classic Linen Shirt", "category": "clothing", "price": 89.99, "stock": 50,
     "description": "Premium Italian linen shirt with mother-of-pearl buttons", "image": _img("1596755094514-f87e34085b2c")},
    {"name": "Leather Crossbody Bag", "category": "bags", "price": 249.99, "stock": 30,
     "description": "Handcrafted full-grain leather crossbody bag", "image": _img("1548036328-c9fa89d128fa")},
    {"name": "Minimalist Watch", "category": "accessories", "price": 179.99, "stock": 40,
     "description": "Swiss movement automatic watch with sapphire crystal", "image": _img("1523275335684-37898b6baf30")},
    {"name": "Suede Chelsea Boots", "category": "shoes", "price": 199.99, "stock": 25,
     "description": "Premium Italian suede Chelsea boots with leather sole", "image": _img("1608256246200-53e635b5b65f")},
    {"name": "Cashmere Sweater", "category": "clothing", "price": 159.99, "stock": 45,
     "description": "Ultra-soft 100% cashmere crew neck sweater", "image": _img("1576566588028-4147f3842f27")},
    {"name": "Silk Scarf", "category": "accessories", "price": 69.99, "stock": 60,
     "description": "Hand-printed pure silk scarf with gift box", "image": _img("1601924994987-69e26d50dc26")},
    {"name": "Canvas Tote Bag", "category": "bags", "price": 49.99, "stock": 80,
     "description": "Durable organic canvas tote with leather handles", "image": _img("1590874103328-eac38a683ce7")},
    {"name": "Leather Loafers", "category": "shoes", "price": 149.99, "stock": 35,
     "description": "Classic penny loafers in premium calf leather", "image": _img("1533867617858-e7b97e060509")},
    {"name": "Wool Blazer", "category": "clothing", "price": 299.99, "stock": 20,
     "description": "Tailored Italian wool blazer with peak lapels", "image": _img("1507679799987-c73779587ccf")},
    {"name": "Leather Belt", "category": "accessories", "price": 79.99, "stock": 70,
     "description": "Full-grain leather belt with brass buckle", "image": _img("1624222247344-3f9dc95a8be6")},
    {"name": "Designer Sneakers", "category": "shoes", "price": 189.99, "stock": 45,
     "description": "Premium leather low-top sneakers", "image": _img("1549298916-b41d501d3772")},
    {"name": "Leather Briefcase", "category": "bags", "price": 399.99, "stock": 15,
     "description": "Professional leather briefcase with laptop compartment", "image": _img("1553062407-98eeb64c6a62")},
]


async def seed_shop() -> dict:
    await ensure_indexes()
    admin_created = False
    if not await users_repo.get_user_by_email(ADMIN["email"]):
        await users_repo.create_user(
            name=ADMIN["name"],
            email=ADMIN["email"],
            password_hash=hash_password(ADMIN["password"]),
            role=Role.ADMIN.value,
        )
        admin_created = True
        logger.info("Admin user created: %s", ADMIN["email"])

    removed = await products_repo.delete_all()
    inserted = await products_repo.insert_many(CATALOGUE)
    logger.info("Replaced %d products with %d catalogue items", removed, inserted)
    return {"admin_created": admin_created, "products": inserted}


def main():
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    select_database(settings.database_name(Deployment.SHOP))
    try:
        asyncio.run(seed_shop())
    finally:
        close_db()


if __name__ == "__main__":
    main()
