"""
DRF exception handler that gives framework errors the same
{'error', 'detail'} body the views return for service errors.
"""
from rest_framework import exceptions
from rest_framework.views import exception_handler

ERROR_LABELS = {
    exceptions.ParseError: 'Malformed Input',
    exceptions.ValidationError: 'Validation Error',
    exceptions.NotFound: 'Not Found',
    exceptions.MethodNotAllowed: 'Method Not Allowed',
    exceptions.UnsupportedMediaType: 'Unsupported Media Type',
}


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None:
        return None

    label = next(
        (label for exc_class, label in ERROR_LABELS.items() if isinstance(exc, exc_class)),
        'Request Error'
    )
    detail = response.data
    # Single-message errors arrive as {'detail': '...'}
    if isinstance(detail, dict) and set(detail) == {'detail'}:
        detail = detail['detail']

    response.data = {'error': label, 'detail': detail}
    return response
