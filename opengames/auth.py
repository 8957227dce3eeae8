"""
Admin authentication: a single shared API key sent as a Bearer token.
"""

import hmac
import logging
from functools import wraps

from flask import current_app, request

from opengames.exceptions import AuthenticationException

# Retrieve main logger
logger = logging.getLogger("main")


def check_api_token(request):
    """
    Validate Bearer token from Authorization header against ADMIN_API_KEY.
    Returns: (success, error)
    """
    expected = current_app.config.get("ADMIN_API_KEY")
    if not expected:
        logger.error("ADMIN_API_KEY is not configured, denying admin request")
        return False, "Unauthorized"

    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return False, "Missing or invalid token"

    token = auth_header[len("Bearer "):].strip()
    if not hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
        return False, "Invalid token"

    return True, None


def admin_required(f):
    @wraps(f)
    def decorated_view(*args, **kwargs):
        success, error = check_api_token(request)
        if not success:
            logger.warning(f"Rejected admin request to {request.path} from {request.remote_addr}: {error}")
            raise AuthenticationException(error)
        return f(*args, **kwargs)

    return decorated_view
