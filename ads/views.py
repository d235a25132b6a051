"""
Views for ad management and public ad lookup.
"""
import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from sites.models import SiteSettings
from .models import Ad, get_active_ad
from .serializers import AdSerializer, PublicAdSerializer

logger = logging.getLogger(__name__)


class AdViewSet(viewsets.ModelViewSet):
    """
    ViewSet for managing ads.

    list: GET /api/v1/admin/ads/ - All ads, newest first (optional ?placement=)
    create: POST /api/v1/admin/ads/ - Create an ad (image must already be uploaded)
    retrieve: GET /api/v1/admin/ads/{id}/
    update: PATCH /api/v1/admin/ads/{id}/
    destroy: DELETE /api/v1/admin/ads/{id}/
    toggle: POST /api/v1/admin/ads/{id}/toggle/ - Activate or pause
    """
    serializer_class = AdSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        qs = Ad.objects.all()
        placement = self.request.query_params.get('placement')
        if placement:
            qs = qs.filter(placement=placement)
        return qs

    def destroy(self, request, *args, **kwargs):
        """
        Delete an ad. The image's CDN public id is returned so the caller can
        remove it from the image CDN.
        """
        ad = self.get_object()
        image_public_id = ad.image_public_id
        ad.delete()
        logger.info(f"Deleted ad {kwargs.get('pk')} ({image_public_id})")
        return Response(
            {'message': 'Ad deleted', 'image_public_id': image_public_id},
            status=status.HTTP_200_OK
        )

    @action(detail=True, methods=['post'])
    def toggle(self, request, pk=None):
        """
        POST /api/v1/admin/ads/{id}/toggle/
        Body: { "is_active": true/false } (omitted flips the current value)
        """
        ad = self.get_object()
        is_active = request.data.get('is_active')
        if is_active is None:
            ad.is_active = not ad.is_active
        else:
            ad.is_active = str(is_active).lower() in ('true', '1', 'on')
        ad.save(update_fields=['is_active', 'updated_at'])

        return Response({
            'id': ad.id,
            'is_active': ad.is_active,
            'message': f"Ad {'activated' if ad.is_active else 'paused'}",
        })


@api_view(['GET'])
@permission_classes([AllowAny])
def active_ad(request, placement):
    """
    Newest active ad for a placement, honouring the site-wide ads switch.

    GET /api/v1/ads/active/{placement}/
    Returns: { "enabled": true, "ad": {...} | null }
    """
    if placement not in Ad.placement_values():
        return Response({'error': 'Invalid ad placement'}, status=status.HTTP_400_BAD_REQUEST)

    if not SiteSettings.load().ads_enabled:
        return Response({'enabled': False, 'ad': None})

    ad = get_active_ad(placement)
    return Response({
        'enabled': True,
        'ad': PublicAdSerializer(ad).data if ad else None,
    })
