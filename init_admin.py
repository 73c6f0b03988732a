"""
Bootstrap: create tables, the default business settings row and the admin
login from ADMIN_EMAIL / ADMIN_PASSWORD.

Safe to re-run: existing settings are kept, the admin password is only
replaced when ADMIN_PASSWORD is set.
"""

import logging

from dotenv import load_dotenv

load_dotenv()

from bookbar.auth import hash_password  # noqa: E402
from bookbar.config import get_settings  # noqa: E402
from bookbar.database import SessionLocal, engine  # noqa: E402
from bookbar.models import Base  # noqa: E402
from bookbar.services.business import get_or_create_settings  # noqa: E402

logger = logging.getLogger("init_admin")


def main():
    settings = get_settings()

    if not settings.admin_email:
        raise RuntimeError("ADMIN_EMAIL is not set")

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        row = get_or_create_settings(db)
        row.admin_login_email = settings.admin_email.strip()

        if settings.admin_password:
            row.admin_password_hash = hash_password(settings.admin_password)
            logger.info(f"[BOOTSTRAP] Admin credentials set for {row.admin_login_email}")
        elif not row.admin_password_hash:
            raise RuntimeError("ADMIN_PASSWORD is not set and no admin password exists yet")
        else:
            logger.info(f"[BOOTSTRAP] Admin email set to {row.admin_login_email}, password kept")

        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    main()
