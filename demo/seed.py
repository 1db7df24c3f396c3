#!/usr/bin/env python3
"""
Demo data for local development — NOT FOR PRODUCTION.

Registers a demo admin and two brokers with known passwords against a
running server, promotes the admin in the database the server uses, then
creates sample carriers and calls POST /database/seed for products and
rules. Running it twice is harmless: existing users and non-empty tables
are left alone.

Usage:
    uvicorn app.main:app --reload          # in another terminal
    python demo/seed.py                    # seed http://localhost:8000
    python demo/seed.py --api http://localhost:9000
    python demo/seed.py --users-only       # skip carriers/products/rules
    python demo/seed.py --reset            # delete the SQLite file and exit

Demo logins:
    admin@appetitedemo.com        AdminDemo123!    admin
    jordan.lee@brokerage.example  JordanDemo123!   User
    sam.rivera@brokerage.example  SamDemo123!      User
"""

import argparse
import asyncio
import os
import sys

import httpx

DEFAULT_API = os.environ.get("APPETITE_API_URL", "http://localhost:8000")

DEMO_ADMIN = {
    "email": "admin@appetitedemo.com",
    "password": "AdminDemo123!",
    "name": "Demo Admin",
}

DEMO_BROKERS = [
    {
        "email": "jordan.lee@brokerage.example",
        "password": "JordanDemo123!",
        "name": "Jordan Lee",
        "organizationName": "Northwind Brokerage",
    },
    {
        "email": "sam.rivera@brokerage.example",
        "password": "SamDemo123!",
        "name": "Sam Rivera",
        "organizationName": "Northwind Brokerage",
    },
]

DEMO_CARRIERS = [
    {
        "legalName": "ABC Health Corporation",
        "displayName": "ABC Health Corp",
        "country": "US",
        "primaryContactEmail": "underwriting@abchealth.example",
    },
    {
        "legalName": "XYZ Auto Insurance Company",
        "displayName": "XYZ Auto Insurance",
        "country": "US",
        "primaryContactEmail": "appetite@xyzauto.example",
    },
]


class SeedError(Exception):
    pass


def banner(title: str) -> None:
    print(f"\n{'=' * 44}\n  {title}\n{'=' * 44}")


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

async def ensure_user(api: httpx.AsyncClient, user: dict) -> None:
    """Register the user unless the email is already taken."""
    response = await api.post("/auth/register", json=user)
    if response.status_code == 400 and response.json().get("error_type") == "duplicate_email":
        print(f"  = {user['email']} (already registered)")
        return
    response.raise_for_status()
    print(f"  + {user['email']} ({response.json()['user']['id']})")


async def login_token(api: httpx.AsyncClient, user: dict) -> str:
    response = await api.post(
        "/auth/login", json={"email": user["email"], "password": user["password"]}
    )
    response.raise_for_status()
    return response.json()["token"]


async def grant_admin(email: str) -> bool:
    """
    Set roles="admin" for `email` directly in the configured database.

    Admins are provisioned by an operator, not through the API, so this
    needs the same DATABASE_URL as the server.
    """
    from sqlalchemy import update
    from sqlalchemy.ext.asyncio import create_async_engine

    from app.config import settings
    from app.models.user import ADMIN_ROLE, User

    engine = create_async_engine(settings.DATABASE_URL)
    try:
        async with engine.begin() as conn:
            result = await conn.execute(
                update(User).where(User.email == email).values(roles=ADMIN_ROLE)
            )
    finally:
        await engine.dispose()
    return result.rowcount == 1


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

async def seed_catalog(api: httpx.AsyncClient) -> None:
    response = await api.get("/carriers", params={"pageSize": 1})
    response.raise_for_status()
    existing = response.json()["total"]
    if existing:
        print(f"  = {existing} carriers already present")
    else:
        for carrier in DEMO_CARRIERS:
            created = await api.post("/carriers", json=carrier)
            created.raise_for_status()
            print(f"  + {created.json()['carrierId']} {carrier['displayName']}")

    response = await api.post("/database/seed")
    response.raise_for_status()
    seeded = response.json()["seeded"]
    print(f"  + {seeded['rules']} rules, {seeded['products']} products")


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

async def run(api_url: str, users_only: bool) -> None:
    banner("DEMO SEED — NOT FOR PRODUCTION")

    async with httpx.AsyncClient(base_url=api_url, timeout=30.0) as api:
        try:
            (await api.get("/health")).raise_for_status()
        except httpx.HTTPError as exc:
            raise SeedError(
                f"{api_url} is not answering ({exc.__class__.__name__}). "
                "Start it with: uvicorn app.main:app --reload"
            ) from exc

        print("\nUsers")
        for user in [DEMO_ADMIN, *DEMO_BROKERS]:
            await ensure_user(api, user)

        if not await grant_admin(DEMO_ADMIN["email"]):
            raise SeedError(
                f"{DEMO_ADMIN['email']} is not in the local database; "
                "is the server using the same DATABASE_URL?"
            )
        api.headers["Authorization"] = f"Bearer {await login_token(api, DEMO_ADMIN)}"

        if not users_only:
            print("\nCatalog")
            await seed_catalog(api)

    banner("SEED COMPLETE")
    for user, role in [(DEMO_ADMIN, "admin"), *((b, "User") for b in DEMO_BROKERS)]:
        print(f"  {user['email']:<30s} {user['password']:<16s} {role}")
    print()


def reset() -> None:
    """Delete the configured SQLite file so the server recreates it on restart."""
    from sqlalchemy.engine import make_url

    from app.config import settings

    url = make_url(settings.DATABASE_URL)
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        print(f"  --reset only handles SQLite files (DATABASE_URL={settings.DATABASE_URL})")
        return

    path = os.path.abspath(url.database)
    if os.path.exists(path):
        os.remove(path)
        print(f"  Deleted {path}; restart the server to recreate empty tables.")
    else:
        print(f"  Nothing to delete at {path}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a running Appetite Checker API with demo data.")
    parser.add_argument("--api", default=DEFAULT_API, help=f"API base URL (default: {DEFAULT_API})")
    parser.add_argument("--users-only", action="store_true", help="Create demo users only")
    parser.add_argument("--reset", action="store_true", help="Delete the SQLite database file and exit")
    args = parser.parse_args()

    if args.reset:
        reset()
        return

    try:
        asyncio.run(run(args.api, args.users_only))
    except SeedError as exc:
        print(f"\n  ERROR: {exc}\n", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
