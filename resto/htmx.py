"""
Rendering helpers for HTMX-driven pages.

A view decorated with ``htmx_view`` returns a context dict. Full page loads
render the page template; HTMX requests (``HX-Request`` header) render only
the partial. A ``template`` key in the context overrides the partial.
"""

from functools import wraps

from django.http import HttpResponse
from django.shortcuts import render

from .module import NAVIGATION


def with_module_nav(view_id):
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            request.current_nav = view_id
            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator


def htmx_view(page_template, partial_template):
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            result = view_func(request, *args, **kwargs)
            if isinstance(result, HttpResponse):
                return result

            context = dict(result or {})
            is_htmx = request.headers.get('HX-Request') == 'true'
            template = context.pop('template', None)
            context.setdefault('navigation', NAVIGATION)
            context.setdefault('current_nav', getattr(request, 'current_nav', ''))
            context.setdefault('partial_template', template or partial_template)
            return render(request, context['partial_template'] if is_htmx else page_template, context)
        return wrapper
    return decorator
