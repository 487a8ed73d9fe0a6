#!/usr/bin/env python3
"""
MongoDB Initialization Script for Development

Seeds the finance / k12 schema documents and creates the indexes used by
the schema store and the record repositories.

Usage:
    python scripts/init_mongodb.py
    python scripts/init_mongodb.py --uri mongodb://localhost:27017 --db records_service
    python scripts/init_mongodb.py --reset-schemas
"""

import os
import sys
import json
import argparse
from datetime import datetime
from pathlib import Path

from pymongo import MongoClient, ASCENDING

SEED_DIR = Path(__file__).resolve().parent.parent / "api" / "app" / "schema"
SCHEMA_COLLECTION = "schemas"

# schemaName -> identity field of its records
RESOURCES = {
    "finance": "financeID",
    "k12": "k12ID",
}


def load_seed(schema_name):
    with open(SEED_DIR / f"{schema_name}_schema.json", "r", encoding="utf-8") as f:
        return json.load(f)


def seed_schemas(db, reset=False):
    """Insert seed schema documents that are not in MongoDB yet."""
    seeded = []
    kept = []

    for schema_name in RESOURCES:
        document = load_seed(schema_name)
        existing = db[SCHEMA_COLLECTION].find_one({"schemaName": schema_name})

        if existing is not None and not reset:
            kept.append(schema_name)
            print(f"   ⏭️  Kept existing schema: {schema_name}")
            continue

        db[SCHEMA_COLLECTION].replace_one({"schemaName": schema_name}, document, upsert=True)
        seeded.append(schema_name)
        print(f"   ✅ Seeded schema: {schema_name}")

    return seeded, kept


def create_indexes(db):
    """Create all required indexes."""
    print("\n   Creating indexes...")

    indexes = {
        SCHEMA_COLLECTION: [
            ([("schemaName", ASCENDING)], {"unique": True}),
        ],
    }

    for schema_name, id_field in RESOURCES.items():
        document = db[SCHEMA_COLLECTION].find_one({"schemaName": schema_name}) or load_seed(schema_name)
        indexes[document["collectionName"]] = [
            ([(id_field, ASCENDING)], {"unique": True}),
        ]

    created_count = 0
    for collection, index_list in indexes.items():
        for index_keys, options in index_list:
            db[collection].create_index(index_keys, **options)
            created_count += 1
            print(f"   ✅ {collection}: {index_keys[0][0]}")

    print(f"   ✅ Created/verified {created_count} indexes")
    return created_count


def main():
    parser = argparse.ArgumentParser(description='Initialize MongoDB for the Records Service')
    parser.add_argument('--uri', default=os.getenv('MONGODB_URI', 'mongodb://localhost:27017'),
                        help='MongoDB connection URI')
    parser.add_argument('--db', default=os.getenv('MONGODB_DATABASE', 'records_service'),
                        help='Database name')
    parser.add_argument('--reset-schemas', action='store_true',
                        help='Overwrite stored schemas with the seed files (DANGEROUS)')
    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("   MongoDB Initialization for Records Service")
    print("   " + datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
    print("=" * 60)
    print(f"\n   URI: {args.uri}")
    print(f"   Database: {args.db}")

    try:
        # Connect to MongoDB
        print("\n[1/3] Connecting to MongoDB...")
        client = MongoClient(args.uri, serverSelectionTimeoutMS=5000)
        client.admin.command('ping')
        print("   ✅ Connected successfully")

        db = client[args.db]

        if args.reset_schemas:
            confirm = input("   ⚠️  This will DISCARD runtime schema edits. Type 'YES' to confirm: ")
            if confirm != 'YES':
                print("   Cancelled")
                client.close()
                return 1

        print("\n[2/3] Seeding schemas...")
        seeded, kept = seed_schemas(db, reset=args.reset_schemas)
        print(f"   Summary: {len(seeded)} seeded, {len(kept)} already existed")

        print("\n[3/3] Creating indexes...")
        index_count = create_indexes(db)

        print("\n" + "=" * 60)
        print("   Initialization Complete!")
        print("=" * 60)
        print(f"\n   Schemas: {', '.join(RESOURCES)}")
        print(f"   Indexes: {index_count}")
        print()

        client.close()
        return 0

    except Exception as e:
        print(f"\n   ❌ Error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
