"""Seed script for development data.

Creates:
- Owner principal (id from SEED_OWNER_ID, or a fresh one)
- Organization "Tenancy Dev" (slug from SEED_ORG_SLUG) owned by that principal

Can be run multiple times safely (skips if exists). Prints a bearer token
for the owner so the API can be exercised right away.
"""
import asyncio
import os
import sys
from pathlib import Path
from uuid import UUID, uuid4

# Add backend to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from tenancy.core.database import get_db
from tenancy.core.security import create_access_token
from tenancy.services.membership_store import MembershipStore
from tenancy.services.org_service import OrganizationService


async def seed_data():
    """Seed development data."""
    print("Starting database seeding...")

    org_name = os.environ.get("SEED_ORG_NAME", "Tenancy Dev")
    org_slug = os.environ.get("SEED_ORG_SLUG", "tenancy-dev")
    owner_id = UUID(os.environ["SEED_OWNER_ID"]) if os.environ.get("SEED_OWNER_ID") else uuid4()

    async for db in get_db():
        store = MembershipStore(db)
        await store.upsert_profile(owner_id, display_name="Dev Owner")

        existing_org = await store.get_organization_by_slug(org_slug)
        if existing_org:
            print(f"✓ Organization '{org_slug}' already exists (ID: {existing_org.id})")
        else:
            org = await OrganizationService(db).create(owner_id, org_name, org_slug)
            print(f"✓ Created organization '{org_slug}' (ID: {org.id})")

        await db.commit()

    print("\n✓ Database seeding completed successfully!")
    print("\nOwner principal:")
    print(f"  ID: {owner_id}")
    print(f"  Token: {create_access_token({'sub': str(owner_id)})}")


if __name__ == "__main__":
    asyncio.run(seed_data())
