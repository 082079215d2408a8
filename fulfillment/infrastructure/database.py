import logging

from django.conf import settings
from django.db import DatabaseError, connections

logger = logging.getLogger(__name__)


def check_database_connection(alias="default"):
    """Run a trivial query on ``alias``; raises ValueError when it cannot."""
    if alias not in settings.DATABASES:
        logger.error(f"Database '{alias}' is not configured !!")
        raise ValueError(f"Database '{alias}' is not configured")

    try:
        with connections[alias].cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError as e:
        logger.error(f"Database connection error: {e}")
        raise ValueError(f"Database connection error: {e}")
