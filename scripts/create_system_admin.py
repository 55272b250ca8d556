#!/usr/bin/env python3
"""Create the first system administrator account.

Usage:
    python scripts/create_system_admin.py admin@example.com "Operator Name"

System administrators cannot be created through the API, so a fresh
deployment needs one bootstrapped here. The account gets temporary
credentials and must complete initial setup on first login.
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path to import from src
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.api.middleware.error_handler import APIError
from src.models.profile import UserRole
from src.services.user_service import UserService


async def create_system_admin(email: str, full_name: str) -> None:
    """Create the account and print its temporary credentials."""
    profile, temp_login_id, temp_password = await UserService().create_managed_user(
        email, full_name, UserRole.SYSTEM_ADMIN, None
    )

    print("✓ System administrator created")
    print(f"   Profile ID: {profile['id']}")
    print(f"   Login ID:   {temp_login_id}")
    print(f"   Password:   {temp_password}")
    print("\nShare these credentials securely; they must be changed on first login.")


def main() -> None:
    """Main execution function."""
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(1)

    email, full_name = sys.argv[1], sys.argv[2]
    print(f"🔧 Creating system administrator {email}...\n")

    try:
        asyncio.run(create_system_admin(email, full_name))
    except APIError as e:
        print(f"❌ Error: {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
