"""
Project-level views (e.g. health check).
"""
from django.db import connection
from django.http import JsonResponse
from django.views.decorators.http import require_GET

from news.search_index import search_index_exists


@require_GET
def health_check(request):
    """
    Liveness check for load balancers and monitoring.
    GET /api/v1/health/ - returns 200 if the app is running.
    No authentication required.

    ``search`` reports which strategy post search is currently served by.
    """
    return JsonResponse({
        "status": "ok",
        "service": "newsdesk-backend",
        "database": connection.vendor,
        "search": "ranked" if search_index_exists() else "fallback",
    })
