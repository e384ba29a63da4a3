"""
Script to import a shipment spreadsheet from the command line.
Usage: python scripts/import_spreadsheet.py <file.xlsx> [--database-url URL]
"""
import argparse
import logging
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from freight_dash.db.database import settings
from freight_dash.errors import FreightDashError, MissingRequiredColumns
from freight_dash.services.import_pipeline import import_spreadsheet
from freight_dash.services.store import ShipmentStore


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Import a shipment spreadsheet")
    parser.add_argument("file", help="Path to the .xlsx/.xls/.csv file")
    parser.add_argument("--database-url", default=settings.database_url)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    with ShipmentStore(args.database_url) as store:
        store.initialize_schema()
        try:
            report = import_spreadsheet(args.file, store)
        except MissingRequiredColumns as e:
            print(f"✗ {e}")
            for missing in e.mapping.missing_report():
                print(f"  - {missing['field']}: use one of {', '.join(missing['accepted_headers'])}")
            print(f"  Headers found: {', '.join(e.mapping.headers_found)}")
            return 1
        except FreightDashError as e:
            print(f"✗ {e}")
            return 1

    print(f"✓ {report.inserted} records inserted")
    for used in report.mapping.fields_used():
        print(f"  {used['field']:<20} <- {used['header']}")
    for failure in report.failures:
        print(f"✗ Row {failure.row_index}: {failure.reason}")
    for warning in report.warnings:
        print(f"! Row {warning.row_index} ({warning.field}): {warning.message}")
    return 0 if not report.failures else 2


if __name__ == "__main__":
    sys.exit(main())
