#!/usr/bin/env python3
"""Print a signed session token for manual API testing.

Usage:
    python scripts/generate_token.py <user-id> <email> [--admin]
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Allow running from any directory without installing the package.
sys.path.insert(0, str(Path(__file__).parent.parent))

from course_booking.core.auth import get_token_service  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("user_id")
    parser.add_argument("email")
    parser.add_argument("--admin", action="store_true", help="issue an admin token")
    args = parser.parse_args()

    token = get_token_service().issue(user_id=args.user_id, email=args.email, is_admin=args.admin)
    print(f"Authorization: Bearer {token}")


if __name__ == "__main__":
    main()
