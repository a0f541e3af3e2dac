"""Seed the product collection with the shop's catalogue.

    python seed.py    # clears existing products and inserts the catalogue
"""
from __future__ import annotations
import asyncio
import logging

from config import get_settings
from database import PRODUCTS, Store
from schemas import ProductIn

logger = logging.getLogger(__name__)

SEED_PRODUCTS: list[dict] = [
    {"name": "Eternal Grace Necklace", "price": 189.99, "category": "Necklaces", "stockQuantity": 50, "imageUrl": "https://images.unsplash.com/photo-1599643478518-a784e5dc4c8f?w=800&q=80", "description": "Handcrafted teardrop pendant with filigree detailing.", "details": ["18K gold-plated brass", "Adjustable 16-18 inch chain", "Hypoallergenic"]},
    {"name": "Celestial Stud Earrings", "price": 79.99, "category": "Earrings", "stockQuantity": 100, "imageUrl": "https://images.unsplash.com/photo-1535632066927-ab7c9ab60908?w=800&q=80", "description": "Star-shaped studs set with cubic zirconia.", "details": ["Sterling silver", "Post back closure", "8mm diameter"]},
    {"name": "Infinity Love Ring", "price": 129.99, "category": "Rings", "stockQuantity": 75, "imageUrl": "https://images.unsplash.com/photo-1605100804763-247f67b3557e?w=800&q=80", "description": "Slim infinity band for stacking or wearing alone.", "details": ["14K rose gold plated", "Sizes 5-9", "Nickel-free"]},
    {"name": "Pearl Drops Earrings", "price": 149.99, "category": "Earrings", "stockQuantity": 60, "imageUrl": "https://images.unsplash.com/photo-1611591437281-460bfbe1220a?w=800&q=80", "description": "Freshwater pearls on fine gold hooks.", "details": ["Genuine freshwater pearls", "Gold-filled hooks"]},
    {"name": "Moonstone Pendant", "price": 199.99, "category": "Necklaces", "stockQuantity": 40, "imageUrl": "https://images.unsplash.com/photo-1603561591411-07134e71a2a9?w=800&q=80", "description": "Moonstone centrepiece in a micro-pave halo.", "details": ["Natural moonstone", "Sterling silver setting"]},
    {"name": "Vintage Rose Bracelet", "price": 169.99, "category": "Bracelets", "stockQuantity": 45, "imageUrl": "https://images.unsplash.com/photo-1611591437281-460bfbe1220a?w=800&q=80", "description": "Carved rose motifs with an antique finish.", "details": ["Antique brass finish", "Toggle clasp"]},
    {"name": "Geometric Cuff Bangle", "price": 139.99, "category": "Bracelets", "stockQuantity": 80, "imageUrl": "https://images.unsplash.com/photo-1515562141207-7a88fb7ce338?w=800&q=80", "description": "Architectural cuff with a matte finish.", "details": ["Matte gold plating", "Open cuff fits most wrists"]},
    {"name": "Diamond Halo Ring", "price": 299.99, "category": "Rings", "stockQuantity": 30, "imageUrl": "https://images.unsplash.com/photo-1605100804763-247f67b3557e?w=800&q=80", "description": "Centre stone framed by a pave-set halo.", "details": ["Lab-grown diamond", "Platinum plated", "Sizes 5-9"]},
    {"name": "Layered Chain Necklace", "price": 159.99, "category": "Necklaces", "stockQuantity": 65, "imageUrl": "https://images.unsplash.com/photo-1599643478518-a784e5dc4c8f?w=800&q=80", "description": "Three fine chains in graduated lengths.", "details": ["14K gold-filled", "Lengths 16, 18 and 20 inches"]},
    {"name": "Sapphire Teardrop Earrings", "price": 219.99, "category": "Earrings", "stockQuantity": 55, "imageUrl": "https://images.unsplash.com/photo-1535632066927-ab7c9ab60908?w=800&q=80", "description": "Blue teardrop stones in a claw setting.", "details": ["Created sapphire", "Lever-back hooks"]},
    {"name": "Twisted Band Ring", "price": 99.99, "category": "Rings", "stockQuantity": 90, "imageUrl": "https://images.unsplash.com/photo-1605100804763-247f67b3557e?w=800&q=80", "description": "Twisted band that catches light from every angle.", "details": ["Sterling silver", "Sizes 5-10"]},
    {"name": "Charm Bracelet Set", "price": 179.99, "category": "Bracelets", "stockQuantity": 70, "imageUrl": "https://images.unsplash.com/photo-1611591437281-460bfbe1220a?w=800&q=80", "description": "Fine chain bracelet with three interchangeable charms.", "details": ["Three charms included", "Lobster clasp"]},
]


def seed_documents() -> list[dict]:
    # Validate through the schema so defaults (inStock etc.) are filled in
    return [ProductIn.model_validate(p).to_document() for p in SEED_PRODUCTS]


async def seed_products(store: Store, reset: bool = False) -> int:
    """Insert the catalogue. Without ``reset`` nothing happens if products exist."""
    if reset:
        removed = await store.delete_all(PRODUCTS)
        logger.info("Cleared %d existing products", removed)
    elif await store.count_documents(PRODUCTS) > 0:
        return 0
    inserted = await store.insert_many(PRODUCTS, seed_documents())
    logger.info("Seeded %d products", inserted)
    return inserted


async def main() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    store = Store.connect(settings)
    try:
        await seed_products(store, reset=True)
    finally:
        store.close()


if __name__ == "__main__":
    asyncio.run(main())
