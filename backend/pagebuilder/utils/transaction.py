import logging
from contextlib import contextmanager
from pagebuilder.extensions import db

logger = logging.getLogger(__name__)


@contextmanager
def transactional(session=None):
    """
    Commit on success, roll back and re-raise on any error.

    Rolling back also releases row locks taken with ``with_for_update``
    before the block was entered.
    """
    session = session or db.session
    try:
        yield session
        session.commit()
    except Exception as exc:
        session.rollback()
        logger.debug("Rolled back transaction after %s", type(exc).__name__)
        raise
