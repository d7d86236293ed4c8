#!/usr/bin/env python3
"""
Script: run_001_unified_catalog.py
Purpose: Create the unified catalog schema

This script:
1. Runs 001_unified_catalog.sql (product_types, products, product_variants, variant_sku_seq)
2. Verifies every table and the SKU sequence exist afterwards

Usage:
    cd backend
    python scripts/migrations/run_001_unified_catalog.py [--dry-run]

Options:
    --dry-run    Show what would be done without making changes
"""

import sys
import argparse
from pathlib import Path
from datetime import datetime

import psycopg2
from dotenv import load_dotenv

BACKEND_DIR = Path(__file__).parent.parent.parent
SQL_FILE = Path(__file__).parent / '001_unified_catalog.sql'

load_dotenv(BACKEND_DIR / '.env')

from unified_catalog.core.config import settings

EXPECTED_TABLES = ['product_types', 'products', 'product_variants']
EXPECTED_SEQUENCE = 'variant_sku_seq'


def print_header(title: str):
    """Print formatted header"""
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}\n")


def print_step(step: int, description: str):
    """Print step indicator"""
    print(f"\n[Step {step}] {description}")
    print("-" * 50)


def check_schema(cursor) -> dict:
    """Check which catalog tables and the SKU sequence currently exist"""
    result = {'tables': {}, 'sequence': False}

    for table in EXPECTED_TABLES:
        cursor.execute("""
            SELECT EXISTS (
                SELECT FROM information_schema.tables
                WHERE table_schema = 'public'
                AND table_name = %s
            )
        """, (table,))
        result['tables'][table] = cursor.fetchone()[0]

    cursor.execute("""
        SELECT EXISTS (
            SELECT FROM information_schema.sequences
            WHERE sequence_schema = 'public'
            AND sequence_name = %s
        )
    """, (EXPECTED_SEQUENCE,))
    result['sequence'] = cursor.fetchone()[0]

    return result


def main():
    parser = argparse.ArgumentParser(description='Create the unified catalog schema')
    parser.add_argument('--dry-run', action='store_true', help='Show what would be done without making changes')
    args = parser.parse_args()

    dry_run = args.dry_run

    print_header("Migration 001: Unified Catalog")
    print(f"Timestamp: {datetime.now().isoformat()}")
    print(f"Mode: {'DRY RUN' if dry_run else 'EXECUTE'}")

    if not settings.DATABASE_URL:
        print("\nERROR: DATABASE_URL not set")
        sys.exit(1)

    print_step(1, "Connecting to database")
    try:
        conn = psycopg2.connect(settings.DATABASE_URL)
        conn.autocommit = False
        cursor = conn.cursor()
        print("  Connected successfully")
    except psycopg2.Error as e:
        print(f"  ERROR: {e}")
        sys.exit(1)

    print_step(2, "Checking current database state")
    before_state = check_schema(cursor)
    for table, exists in before_state['tables'].items():
        print(f"    {table}: {'EXISTS' if exists else 'not found'}")
    print(f"    {EXPECTED_SEQUENCE}: {'EXISTS' if before_state['sequence'] else 'not found'}")

    print_step(3, "Executing SQL migration")
    if dry_run:
        print(f"  [DRY RUN] Would execute {SQL_FILE.name}")
    else:
        try:
            cursor.execute(SQL_FILE.read_text())
            conn.commit()
            print("  Migration committed successfully")
        except psycopg2.Error as e:
            conn.rollback()
            print(f"  ERROR: {e}")
            print("  Migration rolled back")
            sys.exit(1)

    print_step(4, "Verifying database changes")
    after_state = check_schema(cursor)
    cursor.close()
    conn.close()

    missing = [table for table, exists in after_state['tables'].items() if not exists]
    if not after_state['sequence']:
        missing.append(EXPECTED_SEQUENCE)

    print_header("Summary")
    if dry_run:
        print("DRY RUN COMPLETE - No changes were made")
    elif missing:
        print(f"MIGRATION INCOMPLETE - missing: {', '.join(missing)}")
        sys.exit(1)
    else:
        print("MIGRATION COMPLETE")
        print(f"  - {len(EXPECTED_TABLES)} tables and sequence {EXPECTED_SEQUENCE} in place")


if __name__ == '__main__':
    main()
