# src/forge_api/scripts/tokens.py
"""Issue a bearer token for an existing account, for operators and tooling."""

from __future__ import annotations

import argparse
import sys

from forge_api.core.security import create_access_token
from forge_api.db.session import session_scope
from forge_api.models import User


def issue_token(user_id: int) -> str:
    """Return a signed access token for ``user_id``.

    Raises:
        LookupError: If no such user exists.
    """
    with session_scope() as db:
        user = db.get(User, user_id)
        if user is None:
            raise LookupError(f"User {user_id} does not exist")
        return create_access_token(user.id, {"role": user.role.value})


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("user_id", type=int)
    args = parser.parse_args(argv)
    try:
        print(issue_token(args.user_id))
    except LookupError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
