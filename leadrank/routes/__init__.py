"""
Shared helpers for the JSON blueprints.
"""
import logging

from flask import jsonify

from leadrank.ranking.errors import RankingError

logger = logging.getLogger('routes')


def error_response(e: Exception):
    """RankingError → its status code; anything else → 500."""
    if isinstance(e, RankingError):
        if e.status_code >= 500:
            logger.error("%s: %s", e.__class__.__name__, e)
        return jsonify({'error': str(e)}), e.status_code
    logger.error("Unhandled error: %s", e, exc_info=True)
    return jsonify({'error': str(e) or e.__class__.__name__}), 500
