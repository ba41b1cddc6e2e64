"""Create the first admin account.

Admins cannot sign up through the API, so a fresh deployment runs::

    ADMIN_EMAIL=admin@example.com ADMIN_PASSWORD=... python -m myclinics.seed
"""
import logging
import sys

from dotenv import load_dotenv
from sqlmodel import Session

from .core.config import settings
from .db.session import engine, create_db_and_tables
from .utils import hash_password, normalize_email, is_strong_password
from .infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository

logger = logging.getLogger(__name__)


def seed_admin(session: Session, email: str, password: str, name: str = settings.ADMIN_NAME) -> str:
    """Create (or promote) the admin account; returns its id."""
    repo = SqlUserRepository(session)
    email = normalize_email(email)
    existing = repo.get_by_email(email)
    if existing:
        if existing.role != "admin":
            repo.update_profile_fields(existing.id, {"role": "admin", "is_email_verified": True})
            logger.info(f"Promoted existing user {existing.id} to admin")
        return existing.id
    user = repo.create(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role="admin",
        phone=None,
        address=None,
        date_of_birth=None,
    )
    repo.mark_email_verified(user.id)
    logger.info(f"Created admin {user.id}")
    return user.id


def main() -> int:
    load_dotenv()
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO), format=settings.LOG_FORMAT)
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        logger.error("ADMIN_EMAIL and ADMIN_PASSWORD must be set")
        return 1
    if not is_strong_password(settings.ADMIN_PASSWORD):
        logger.error("ADMIN_PASSWORD needs at least 8 characters with a letter and a digit")
        return 1
    create_db_and_tables()
    with Session(engine) as session:
        seed_admin(session, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
    return 0


if __name__ == "__main__":
    sys.exit(main())
