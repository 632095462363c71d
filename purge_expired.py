"""
Remove expired verification codes and sessions.

Expired rows are already ignored at read time; this only reclaims space.
Run it from cron or by hand: python purge_expired.py
"""

import sys
from digital_menu.core.config import settings
from digital_menu.core.database import Database
from digital_menu.models.session import UserSession
from digital_menu.models.verification_code import VerificationCode
from digital_menu.services.auth_service import AuthService


def show_stats(database: Database):
    """Print row counts of the auth tables"""
    db = database.session()
    try:
        print("\n📊 Auth tables:")
        print(f"  - Verification codes: {db.query(VerificationCode).count()}")
        print(f"  - Sessions: {db.query(UserSession).count()}")
    finally:
        db.close()


def purge(database: Database) -> dict:
    db = database.session()
    try:
        return AuthService(db).purge_expired()
    finally:
        db.close()


if __name__ == "__main__":
    print("=" * 60)
    print("🧹 DIGITAL MENU - Purge expired codes and sessions")
    print("=" * 60)

    database = Database(settings.DATABASE_URL)
    database.init_db()

    show_stats(database)

    try:
        removed = purge(database)
    except Exception as e:
        print(f"\n❌ Purge failed: {e}")
        sys.exit(1)
    finally:
        show_stats(database)
        database.dispose()

    print(f"\n✅ Removed {removed['verification_codes']} codes and {removed['sessions']} sessions")
