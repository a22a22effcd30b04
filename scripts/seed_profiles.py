"""
Seed demo profiles into the configured store.

Usage:
    python scripts/seed_profiles.py --count 500 --seed 42

Uses STORE_BACKEND / FIREBASE_PROJECT_ID from the environment (.env).
Seeding the memory backend only makes sense as a dry run.
"""

import argparse
import sys

from dotenv import load_dotenv

load_dotenv()

from matchmaker.config import config, validate_config
from matchmaker.dependencies import build_repositories
from matchmaker.tools.seed_tools import DEFAULT_WEIGHTS, compute_region_counts, seed_profiles
from matchmaker.utils.logging_config import setup_logging


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Seed demo profiles")
    parser.add_argument("--count", type=int, default=500, help="profiles to create")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("--dry-run", action="store_true", help="print region split only")
    args = parser.parse_args(argv)

    setup_logging(debug=config.DEBUG)

    if args.dry_run:
        for region, count in compute_region_counts(args.count).items():
            print(f"  {region:<10} {count:>5}  (weight {DEFAULT_WEIGHTS[region]:.2f})")
        return 0

    try:
        validate_config()
    except ValueError as e:
        print(f"❌ Configuration error:\n{e}")
        return 1

    profiles, _ = build_repositories(config)
    created = seed_profiles(profiles, args.count, seed=args.seed)
    print(f"✅ Created {len(created)} profiles in {config.STORE_BACKEND}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
