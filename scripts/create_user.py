"""Create a user in the configured DB.

Usage:
  python scripts/create_user.py --username alice --password '...' [--admin]

NOTE: This is intended for local/dev.
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from confusion_api.auth.crud import create_user, get_user_by_id, public_user
from confusion_api.auth.security import PasswordHasher
from confusion_api.config import load_config
from confusion_api.db import init_db, open_store


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--username", required=True)
    ap.add_argument("--password", required=True)
    ap.add_argument("--firstname", default="")
    ap.add_argument("--lastname", default="")
    ap.add_argument("--admin", action="store_true")
    args = ap.parse_args()

    cfg = load_config()
    init_db(cfg.DB_DSN)
    hasher = PasswordHasher(rounds=cfg.AUTH_HASH_ROUNDS)

    with open_store(cfg) as conn:
        user_id = create_user(
            conn,
            hasher,
            username=args.username,
            password=args.password,
            firstname=args.firstname,
            lastname=args.lastname,
            is_admin=args.admin,
        )
        u = public_user(get_user_by_id(conn, user_id))

    print("Created user:")
    print(u)


if __name__ == "__main__":
    main()
