"""Bearer-token guard for the back-office API views."""

import logging
from functools import wraps

import jwt
from django.conf import settings
from django.http import JsonResponse


logger = logging.getLogger(__name__)


def decode_bearer_token(request):
    """Return the verified JWT claims from the ``Authorization`` header.

    Returns ``None`` when no bearer token is present. Raises
    :class:`jwt.PyJWTError` when a token is present but does not verify
    against ``settings.JWT_SECRET``.
    """

    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    token = auth.split(" ", 1)[1].strip()
    if not token:
        return None
    return jwt.decode(token, settings.JWT_SECRET, algorithms=["HS256"])


def jwt_required(view):
    @wraps(view)
    def inner(request, *args, **kwargs):
        if not settings.JWT_SECRET:
            logger.error("JWT_SECRET missing in settings; refusing authenticated request")
            return JsonResponse({"success": False, "message": "Authentication unavailable"}, status=503)
        try:
            claims = decode_bearer_token(request)
        except jwt.PyJWTError:
            return JsonResponse({"success": False, "message": "Invalid or expired token"}, status=403)
        if claims is None:
            return JsonResponse({"success": False, "message": "Access token required"}, status=401)
        request.jwt_claims = claims
        return view(request, *args, **kwargs)

    return inner
