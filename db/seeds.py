"""
Database seeder script for the mention analytics system

This script populates the database with sample brands and simulated
mentions for development and testing.
"""

import logging
from typing import Dict, List, Optional

from analytics.errors import AnalyticsError
from analytics.ingest import MentionIngestor
from analytics.store import MentionStore

logger = logging.getLogger(__name__)

SAMPLE_BRANDS = [
    {
        "name": "Acme",
        "keywords": ["acme", "acme corp"],
        "competitors": ["Globex", "Initech"],
    },
    {"name": "Globex", "keywords": ["globex"], "competitors": ["Acme"]},
    {"name": "Initech", "keywords": ["initech", "tps report"], "competitors": []},
]


def seed_brands(store: MentionStore, brands: Optional[List[Dict]] = None) -> List[str]:
    """Register sample brands, skipping ones that already exist"""
    seeded = []
    for brand in brands or SAMPLE_BRANDS:
        try:
            store.get_brand(brand["name"])
            print(f"   ⏭️  Brand {brand['name']} already exists")
            continue
        except AnalyticsError:
            pass

        store.add_brand(brand["name"], brand["keywords"], brand["competitors"])
        seeded.append(brand["name"])

    print(f"✅ Seeded {len(seeded)} brands")
    return seeded


def seed_sample_mentions(
    store: MentionStore, count_per_brand: int = 50, seed: Optional[int] = 42
) -> int:
    """Seed simulated mentions spread over the last week for every active brand"""
    ingestor = MentionIngestor(store)
    total = 0
    for index, brand in enumerate(store.list_active_brands()):
        brand_seed = None if seed is None else seed + index
        try:
            total += len(ingestor.simulate(brand, count_per_brand, seed=brand_seed))
        except AnalyticsError as e:
            print(f"❌ Error seeding mentions for {brand}: {e}")

    print(f"✅ Seeded {total} sample mentions")
    return total


def run_all_seeds(store: Optional[MentionStore] = None):
    """Run all seed functions in order"""
    print("🌱 Starting database seeding...")

    store = store or MentionStore()
    seed_brands(store)
    seed_sample_mentions(store)

    print("✅ Database seeding completed!")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_all_seeds()
