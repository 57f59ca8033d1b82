# labs/exceptions.py
"""
API error types and the JSON error envelope.

Every failure leaves the API as ``{"error": "<message>"}``, optionally with a
``details`` object. Services raise the exceptions below; anything DRF raises
on its own (authentication, parsing, serializer validation) is flattened by
``api_exception_handler`` into the same shape.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class LabError(APIException):
    """Base class for errors raised by LabWatch services."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error'

    def __init__(self, message=None, details=None):
        self.message = message or self.default_detail
        self.details = details
        super().__init__(self.message)

    def to_dict(self):
        payload = {'error': self.message}
        if self.details is not None:
            payload['details'] = self.details
        return payload


class ValidationError(LabError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request'


class NotFound(LabError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found'


class Forbidden(LabError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Forbidden'


class Conflict(LabError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflict'


class InternalError(LabError):
    pass


def _first_message(data):
    """Pull the first human readable message out of DRF error data."""
    if isinstance(data, dict):
        if 'detail' in data:
            return _first_message(data['detail'])
        for value in data.values():
            message = _first_message(value)
            if message:
                return message
        return None
    if isinstance(data, (list, tuple)):
        for value in data:
            message = _first_message(value)
            if message:
                return message
        return None
    return str(data) if data is not None else None


def api_exception_handler(exc, context):
    """DRF exception handler producing ``{"error": ..., "details"?: ...}``."""
    if isinstance(exc, DjangoValidationError):
        # Model full_clean() failures raised while saving
        details = exc.message_dict if hasattr(exc, 'error_dict') else exc.messages
        exc = ValidationError(_first_message(details) or ValidationError.default_detail, details=details)

    if isinstance(exc, LabError):
        return Response(exc.to_dict(), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        view = context.get('view')
        logger.error(
            f"Unhandled error in {view.__class__.__name__ if view else 'API'}: {exc}",
            exc_info=exc,
        )
        internal = InternalError()
        return Response(internal.to_dict(), status=internal.status_code)

    data = response.data
    payload = {'error': _first_message(data) or 'Request failed'}
    if not (isinstance(data, dict) and set(data.keys()) == {'detail'}):
        payload['details'] = data
    response.data = payload
    return response
