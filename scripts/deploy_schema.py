#!/usr/bin/env python
# ============================================================================
# SCHEMA DEPLOYMENT SCRIPT
# ============================================================================
# PURPOSE: Deploy the questmirror schema to PostgreSQL using PydanticToSQL
# USAGE:
#   python scripts/deploy_schema.py --dry-run    # Print SQL
#   python scripts/deploy_schema.py              # Execute deployment
#   python scripts/deploy_schema.py --status     # List existing tables
# ============================================================================

import sys
import os
import asyncio
import argparse
import logging

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from infrastructure import DatabaseInitializer
from repositories.database import close_pool, init_pool


async def run(args) -> int:
    if args.dry_run:
        initializer = DatabaseInitializer(pool=None)
        print(f"Schema: {initializer.schema_name}")
        print("=" * 70)
        for stmt in initializer.generate_ddl_statements():
            print(stmt.as_string() + ";\n")
        return 0

    pool = await init_pool(min_size=1, max_size=2, connection_string=args.connection)
    try:
        initializer = DatabaseInitializer(pool)
        print(f"Schema: {initializer.schema_name}")
        print("=" * 70)

        if args.status:
            existing = await initializer.get_tables_in_schema()
            print(f"\nTables ({len(existing)}):")
            for table in initializer.expected_tables:
                marker = "present" if table in existing else "MISSING"
                print(f"  - {initializer.schema_name}.{table}: {marker}")
            return 0 if all(t in existing for t in initializer.expected_tables) else 1

        result = await initializer.initialize_all_async()

        print("\n[RESULTS]\n")
        for step in result.steps:
            print(f"[{step.status.upper()}] {step.name}: {step.message}")
            if step.error:
                print(f"   Error: {step.error}")
            if step.details and args.verbose:
                for key, value in step.details.items():
                    print(f"   {key}: {value}")

        print("\n" + "=" * 70)
        if result.success:
            print("Deployment completed successfully")
            return 0
        print("Deployment failed")
        for error in result.errors:
            print(f"   - {error}")
        return 1
    finally:
        await close_pool()


def main():
    parser = argparse.ArgumentParser(
        description="Deploy the questmirror schema to PostgreSQL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/deploy_schema.py --dry-run     # Print DDL without executing
  python scripts/deploy_schema.py               # Deploy schema
  python scripts/deploy_schema.py --status      # Check current installation

Environment Variables:
  DATABASE_URL          Full PostgreSQL connection string
  POSTGRES_HOST         Database host (default: localhost)
  POSTGRES_DB           Database name (default: postgres)
  POSTGRES_USER         Database user (default: postgres)
  POSTGRES_PASSWORD     Database password
  POSTGRES_PORT         Database port (default: 5432)
  POSTGRES_SSLMODE      SSL mode (default: prefer)
        """
    )
    parser.add_argument("--dry-run", action="store_true", help="Print DDL without executing")
    parser.add_argument("--status", action="store_true", help="Check current installation status")
    parser.add_argument(
        "--connection",
        type=str,
        help="PostgreSQL connection string (overrides environment)"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    print("=" * 70)
    print("QUEST MIRROR - Schema Deployment")
    print("=" * 70)

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
