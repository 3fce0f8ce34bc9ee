from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import exceptions
from rest_framework.views import exception_handler


def _detail(exc):
    if hasattr(exc, 'error_dict'):
        return {
            field: [exceptions.ErrorDetail(str(e.message % e.params if e.params else e.message), code=e.code)
                    for e in errors]
            for field, errors in exc.error_dict.items()
        }
    return [exceptions.ErrorDetail(str(e.message % e.params if e.params else e.message), code=e.code)
            for e in exc.error_list]


def api_exception_handler(exc, context):
    """Report model validation failures as HTTP 400 with per-field detail."""
    if isinstance(exc, DjangoValidationError):
        exc = exceptions.ValidationError(_detail(exc))
    return exception_handler(exc, context)
