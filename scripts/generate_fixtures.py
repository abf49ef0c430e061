"""
Regenerate the golden metadata fixture corpus.

Writes the hex encodings of every instruction variant, the sample PDAs, the
upstream token/system payloads and the packed sample accounts to a JSON file
that other client implementations compare against.

Usage:
  python scripts/generate_fixtures.py
  python scripts/generate_fixtures.py --out /tmp/fixtures.json --check
"""

import argparse
import json
import logging
import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.append(ROOT)

from arch_token_metadata.config import get_settings  # noqa: E402
from arch_token_metadata.fixtures import build_fixtures, load_fixtures, write_fixtures  # noqa: E402

logger = logging.getLogger("arch_token_metadata.fixtures")


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Generate metadata instruction fixtures.")
    parser.add_argument("--out", default=settings.fixtures_path, help="Path of the fixture JSON to write.")
    parser.add_argument(
        "--check",
        action="store_true",
        help="Compare against the existing file instead of writing; exit 1 on drift.",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    fixtures = build_fixtures(settings.program_pubkey())

    if args.check:
        path = os.path.join(ROOT, args.out) if not os.path.isabs(args.out) else args.out
        existing = load_fixtures(path)
        drift = sorted(k for k in set(existing) | set(fixtures) if existing.get(k) != fixtures.get(k))
        if drift:
            logger.error("fixtures_drift path=%s keys=%s", path, ",".join(drift))
            print(json.dumps({k: fixtures.get(k) for k in drift}, indent=2))
            return 1
        logger.info("fixtures_ok path=%s keys=%d", path, len(fixtures))
        return 0

    out = write_fixtures(args.out if os.path.isabs(args.out) else os.path.join(ROOT, args.out), fixtures)
    logger.info("fixtures_written path=%s keys=%d", out, len(fixtures))
    return 0


if __name__ == "__main__":
    sys.exit(main())
