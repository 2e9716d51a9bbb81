# jobs/seed_permissions.py

import argparse

from core.logging_config import logger
from core.permission_store import build_permission_store
from core.permissions import initialize_role_permissions


def run(patch_missing: bool = True, store=None):
    """
    CLI entry point for seeding role permissions.

    Creates missing role rows and, unless --no-patch is given, adds
    newly introduced modules to existing rows. Safe to re-run.
    """
    store = store or build_permission_store(cache_ttl_seconds=0)

    results = initialize_role_permissions(store, updated_by=None, patch_missing=patch_missing)
    for entry in results:
        logger.info(f"{entry['role']}: {entry['status']}")

    logger.info("Permission seeding completed")
    return results


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed default role permissions")
    parser.add_argument(
        "--no-patch",
        action="store_true",
        help="only create missing roles; leave existing rows untouched",
    )
    args = parser.parse_args()
    run(patch_missing=not args.no_patch)
