#!/usr/bin/env python3
"""
Load leads from a CSV file into the database (replaces all leads, runs and results).

Usage:
    python scripts/seed_leads.py                   # LEADS_CSV_PATH (data/leads.csv)
    python scripts/seed_leads.py --csv other.csv

Requires: DATABASE_URL set (or defaults to sqlite:///local.db), schema migrated.
"""
import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from leadrank.logging_config import configure_logging
from leadrank.ranking.errors import RankingError
from leadrank.services.leads_io import import_leads_csv, load_default_csv


def main():
    parser = argparse.ArgumentParser(description='Seed leads from CSV')
    parser.add_argument('--csv', help='Path to a leads CSV (default: LEADS_CSV_PATH)')
    args = parser.parse_args()

    configure_logging()
    try:
        count = import_leads_csv(load_default_csv(args.csv))
    except RankingError as e:
        print(f"Seed failed: {e}", file=sys.stderr)
        return 1
    print(f"Loaded {count} leads")
    return 0


if __name__ == '__main__':
    sys.exit(main())
