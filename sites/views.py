"""
Views for site settings: public branding, admin branding/contact updates and
the global ads switch.
"""
import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from .models import SiteSettings
from .serializers import PublicSiteSettingsSerializer, SiteSettingsSerializer

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([AllowAny])
def public_site_settings(request):
    """
    Branding and contact details for the public layout.

    GET /api/v1/site-settings/public/
    """
    return Response(PublicSiteSettingsSerializer(SiteSettings.load()).data)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def site_settings(request):
    """
    GET   /api/v1/admin/site-settings/ - Current settings
    PATCH /api/v1/admin/site-settings/ - Update branding and contact fields

    Replaced branding images are reported back in ``replaced_public_ids`` so
    the caller can delete them from the image CDN.
    """
    current = SiteSettings.load()
    if request.method == 'GET':
        return Response(SiteSettingsSerializer(current).data)

    previous_ids = current.branding_public_ids()
    serializer = SiteSettingsSerializer(current, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    updated = serializer.save()

    replaced = [
        old_id for field, old_id in previous_ids.items()
        if old_id and field in serializer.validated_data and getattr(updated, field) != old_id
    ]
    if replaced:
        logger.info(f"Branding images replaced: {', '.join(replaced)}")

    data = SiteSettingsSerializer(updated).data
    data['replaced_public_ids'] = replaced
    return Response(data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def toggle_ads_global(request):
    """
    Flip the site-wide ads switch.

    POST /api/v1/admin/ads/toggle-global/
    Returns: { "success": true, "enabled": false }
    """
    current = SiteSettings.load()
    enabled = not current.ads_enabled
    SiteSettings.update(ads_enabled=enabled)
    logger.info(f"Ads {'enabled' if enabled else 'disabled'} site-wide by {request.user}")
    return Response({'success': True, 'enabled': enabled})
