"""
Views for category and location management, plus the public taxonomy lists.
"""
import logging

from rest_framework import viewsets, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from news.listings import division_tree
from news.slugs import SlugConflictError
from .models import Category, Division, District, Upazila
from .serializers import (
    CategorySerializer,
    DivisionSerializer,
    DistrictSerializer,
    UpazilaSerializer,
    DivisionTreeSerializer,
)
from .services import TaxonomyInUseError, save_taxonomy, delete_taxonomy

logger = logging.getLogger(__name__)


class TaxonomyViewSet(viewsets.ModelViewSet):
    """
    Admin CRUD shared by every taxonomy model.

    Slugs are resolved server-side from the name (or a supplied slug) and stay
    stable across edits that do not rename the record. Deletes are refused
    while posts or child locations still reference the record.
    """
    permission_classes = [IsAuthenticated]
    pagination_class = None

    def _save(self, serializer, instance):
        data = dict(serializer.validated_data)
        name = data.pop('name', instance.name)
        slug_source = data.pop('slug', '') or None
        for key, value in data.items():
            setattr(instance, key, value)
        try:
            save_taxonomy(instance, name, slug_source)
        except SlugConflictError as e:
            logger.error(f"Slug conflict saving {type(instance).__name__}: {e}")
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        return None

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        instance = self.get_queryset().model()
        error = self._save(serializer, instance)
        if error is not None:
            return error
        return Response(self.get_serializer(instance).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        error = self._save(serializer, instance)
        if error is not None:
            return error
        return Response(self.get_serializer(instance).data)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        try:
            delete_taxonomy(instance)
        except TaxonomyInUseError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CategoryViewSet(TaxonomyViewSet):
    serializer_class = CategorySerializer
    queryset = Category.objects.all()


class DivisionViewSet(TaxonomyViewSet):
    serializer_class = DivisionSerializer
    queryset = Division.objects.all()


class DistrictViewSet(TaxonomyViewSet):
    """Districts, optionally filtered by ?division=<id>."""
    serializer_class = DistrictSerializer

    def get_queryset(self):
        qs = District.objects.select_related('division')
        division = self.request.query_params.get('division')
        if division:
            qs = qs.filter(division_id=division)
        return qs


class UpazilaViewSet(TaxonomyViewSet):
    """Upazilas, optionally filtered by ?district=<id>."""
    serializer_class = UpazilaSerializer

    def get_queryset(self):
        qs = Upazila.objects.select_related('district')
        district = self.request.query_params.get('district')
        if district:
            qs = qs.filter(district_id=district)
        return qs


@api_view(['GET'])
@permission_classes([AllowAny])
def public_categories(request):
    """GET /api/v1/categories/ - all categories ordered by name."""
    categories = Category.objects.order_by('name')
    return Response(CategorySerializer(categories, many=True).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def public_divisions(request):
    """GET /api/v1/divisions/ - division > district > upazila tree."""
    return Response(DivisionTreeSerializer(division_tree(), many=True).data)
