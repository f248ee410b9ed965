from typing import Generator

from sqlalchemy.orm import Session

from landlord_reports.core.database import SessionLocal


def get_db() -> Generator[Session, None, None]:
    """One session per request, always closed."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
