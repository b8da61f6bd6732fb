import argparse
import sys
from datetime import datetime, timedelta, timezone

import jwt

PAYLOAD = {"app": "photo-rating", "id": "photo-rating-admin"}
LIFETIME_DAYS = 365 * 2


def main(args):
    parser = argparse.ArgumentParser(description="Create an api_key for the photo-rating admin endpoints")
    parser.add_argument(
        "-s", "--secret", help="JWT Secret for Encoding (JWT_SECRET of the service)", type=str, required=True
    )
    parser.add_argument("-d", "--days", help="Lifetime of the key in days", type=int, default=LIFETIME_DAYS)
    args = parser.parse_args(args)
    print(create_jwt_key(dict(PAYLOAD), args.secret, args.days))


def create_jwt_key(payload: dict, secret: str, lifetime_days: int = LIFETIME_DAYS) -> str:
    payload["exp"] = datetime.now(tz=timezone.utc) + timedelta(days=lifetime_days)
    return str(jwt.encode(payload, secret, algorithm="HS256"))


if __name__ == "__main__":
    main(sys.argv[1:])
