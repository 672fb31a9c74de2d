"""Write helpers shared by the domain repositories"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import DuplicateError, StoreError

logger = logging.getLogger(__name__)


def persist(db: Session, entity, label: str):
    """
    Stage an entity and flush it so constraint violations surface here.

    The caller owns the transaction and decides when to commit.
    """
    try:
        db.add(entity)
        db.flush()
    except IntegrityError as e:
        logger.warning(f"⚠️ Duplicate {label} rejected by store: {e.orig}")
        raise DuplicateError(f"Duplicate {label}", {"reason": str(e.orig)}) from e
    except SQLAlchemyError as e:
        logger.error(f"❌ Failed to write {label}: {e}")
        raise StoreError(f"Failed to write {label}") from e
    return entity


def commit(db: Session, label: str) -> None:
    """Commit the current transaction, rolling back and wrapping store failures"""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateError(f"Duplicate {label}", {"reason": str(e.orig)}) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Commit failed for {label}: {e}")
        raise StoreError(f"Failed to save {label}") from e
