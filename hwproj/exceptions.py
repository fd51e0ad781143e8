from __future__ import annotations

import logging

from django.core.exceptions import ObjectDoesNotExist
from rest_framework import exceptions
from rest_framework.views import exception_handler

logger = logging.getLogger("gateway")


def api_exception_handler(exc, context):
    """Translate service failures into plain HTTP status responses.

    A ``DoesNotExist`` escaping from a service becomes a 404, role and
    ownership failures (``PermissionDenied`` from Django or DRF) become a 403.
    """

    if isinstance(exc, ObjectDoesNotExist):
        exc = exceptions.NotFound(str(exc) or None)

    response = exception_handler(exc, context)
    if response is None:
        return None

    view = context.get("view")
    logger.info(
        "%s returned %s: %s",
        view.__class__.__name__ if view is not None else "view",
        response.status_code,
        response.data,
    )
    return response
