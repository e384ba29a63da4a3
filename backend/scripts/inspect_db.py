"""
Script to check the shipments database: table structure and record count.
"""
import argparse
import json
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from freight_dash.db.database import settings
from freight_dash.services.store import ShipmentStore


def inspect_db(database_url: str) -> int:
    with ShipmentStore(database_url) as store:
        structure = store.describe_schema()
        if not structure["table_exists"]:
            print("✗ Table 'shipments' does not exist. Start the API or run an import first.")
            return 1

        print("✓ Table 'shipments' exists")
        for col in structure["columns"]:
            flags = []
            if not col["nullable"]:
                flags.append("NOT NULL")
            if col["primary_key"]:
                flags.append("PRIMARY KEY")
            print(f"  - {col['name']} ({col['type']}) {' '.join(flags)}".rstrip())

        print(f"Total records: {store.count()}")
        records = store.get_all()
        if records:
            print("Example record:")
            print(json.dumps(records[0], indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Inspect the shipments database")
    parser.add_argument("--database-url", default=settings.database_url)
    args = parser.parse_args()
    sys.exit(inspect_db(args.database_url))
