"""Print a long-lived bearer token for scripts and manual testing.

Usage:
    python create_token.py admin
    python create_token.py worker <worker-id>
"""
import sys

from cleanslate_api.app.core.security import ROLES, create_access_token


if __name__ == "__main__":
    if len(sys.argv) < 2 or sys.argv[1] not in ROLES:
        sys.exit(f"usage: create_token.py {{{'|'.join(ROLES)}}} [user-id]")
    role = sys.argv[1]
    user_id = sys.argv[2] if len(sys.argv) > 2 else None
    # One year, in seconds.
    token = create_access_token({"sub": user_id or role, "role": role, "user_id": user_id}, expires_delta=365 * 24 * 60 * 60)
    print(token)
