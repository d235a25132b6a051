"""
Custom middleware for newsdesk_backend.
"""
from django.middleware.common import CommonMiddleware


class APICommonMiddleware(CommonMiddleware):
    """
    CommonMiddleware without APPEND_SLASH redirects under /api/.
    A redirected POST from the admin frontend would lose its body.
    """
    def should_redirect_with_slash(self, request):
        if request.path.startswith('/api/'):
            return False
        return super().should_redirect_with_slash(request)
