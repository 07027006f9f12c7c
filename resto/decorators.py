"""
Session login and role checks for views.

The session carries ``staff_id``, ``user_name`` and ``user_role`` once a
staff member has logged in.
"""

from functools import wraps

from django.conf import settings
from django.http import JsonResponse
from django.shortcuts import redirect
from django.utils.http import urlencode
from django.utils.translation import gettext_lazy as _

from .module import role_has_permission


def _wants_json(request):
    return (
        request.path.startswith('/api/')
        or 'application/json' in request.headers.get('Accept', '')
    )


def login_required(view_func):
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.session.get('staff_id'):
            return redirect(f"{settings.LOGIN_URL}?{urlencode({'next': request.get_full_path()})}")
        return view_func(request, *args, **kwargs)
    return wrapper


def permission_required(permission):
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if not role_has_permission(request.session.get('user_role', ''), permission):
                if _wants_json(request):
                    return JsonResponse(
                        {'success': False, 'message': str(_('Permission denied'))},
                        status=403,
                    )
                return redirect('resto:index')
            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator
