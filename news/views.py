"""
Public news endpoints and the admin post API.
"""
import logging

from django.conf import settings
from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from integrations.facebook import FacebookError, FacebookPublisher
from taxonomy.serializers import CategoryBriefSerializer, DivisionTreeSerializer
from . import listings
from .models import Post
from .search import search as search_posts
from .serializers import PostDetailSerializer, PostListSerializer, PostWriteSerializer
from .services import create_post, delete_post, update_post
from .slugs import SlugConflictError

logger = logging.getLogger(__name__)


def _brief(record):
    return {'id': record.id, 'name': record.name, 'slug': record.slug}


def _listing_response(result, **extra):
    payload = {
        'items': PostListSerializer(result['items'], many=True).data,
        'total': result['total'],
        'page': result['page'],
        'pages': result['pages'],
    }
    payload.update(extra)
    return Response(payload)


def _not_found(message):
    return Response({'error': message}, status=status.HTTP_404_NOT_FOUND)


@api_view(['GET'])
@permission_classes([AllowAny])
def home(request):
    """
    GET /api/v1/home/
    Breaking, featured and latest posts plus the navigation taxonomy.
    """
    data = listings.get_home_data()
    return Response({
        'breaking': PostListSerializer(data['breaking'], many=True).data,
        'featured': PostListSerializer(data['featured'], many=True).data,
        'latest': PostListSerializer(data['latest'], many=True).data,
        'categories': CategoryBriefSerializer(data['categories'], many=True).data,
        'divisions': DivisionTreeSerializer(data['divisions'], many=True).data,
        'trending_tags': data['trending_tags'],
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def latest_news(request):
    """GET /api/v1/news/?page= - latest published posts."""
    return _listing_response(listings.get_latest_news(request.query_params.get('page', 1)))


@api_view(['GET'])
@permission_classes([AllowAny])
def news_detail(request, identifier):
    """
    GET /api/v1/news/{slug-or-id}/

    Posts whose slug is the placeholder are linked by id, so both lookups are
    supported.
    """
    post = listings.get_post_by_slug_or_id(identifier)
    if post is None:
        return _not_found('Post not found')

    sidebar = listings.get_sidebar_data()
    return Response({
        'post': PostDetailSerializer(post).data,
        'related': PostListSerializer(listings.get_related_posts(post), many=True).data,
        'sidebar': {
            'categories': CategoryBriefSerializer(sidebar['categories'], many=True).data,
            'divisions': DivisionTreeSerializer(sidebar['divisions'], many=True).data,
        },
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def search(request):
    """
    GET /api/v1/search/?q=flood&page=1

    Returns: { "query", "page", "total_pages", "total_count", "items": [...] }
    """
    result = search_posts(request.query_params.get('q', ''), request.query_params.get('page', 1))
    return Response({
        'query': result.resolved_query,
        'page': result.page,
        'total_pages': result.total_pages,
        'total_count': result.total_count,
        'items': PostListSerializer(result.items, many=True).data,
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def category_posts(request, slug):
    result = listings.get_published_by_category(slug, request.query_params.get('page', 1))
    if result is None:
        return _not_found('Category not found')
    return _listing_response(result, category=_brief(result['category']))


@api_view(['GET'])
@permission_classes([AllowAny])
def district_posts(request, slug):
    result = listings.get_published_by_district(slug, request.query_params.get('page', 1))
    if result is None:
        return _not_found('District not found')
    return _listing_response(result, district=_brief(result['district']))


@api_view(['GET'])
@permission_classes([AllowAny])
def upazila_posts(request, slug, upazila_slug):
    result = listings.get_published_by_upazila(slug, upazila_slug, request.query_params.get('page', 1))
    if result is None:
        return _not_found('Location not found')
    return _listing_response(
        result,
        district=_brief(result['district']),
        upazila=_brief(result['upazila']),
    )


@api_view(['GET'])
@permission_classes([AllowAny])
def tag_posts(request, tag):
    result = listings.get_published_by_tag(tag, request.query_params.get('page', 1))
    return _listing_response(result, tag=result['tag'])


@api_view(['GET'])
@permission_classes([AllowAny])
def sitemap(request):
    """GET /api/v1/sitemap/ - absolute URLs of every public page."""
    entries = [
        {
            'loc': settings.NEWSDESK.absolute_url(path),
            'lastmod': last_modified.isoformat() if last_modified else None,
        }
        for path, last_modified in listings.sitemap_entries()
    ]
    return Response({'urls': entries})


class PostViewSet(viewsets.ModelViewSet):
    """
    ViewSet for managing posts.

    list: GET /api/v1/admin/posts/ - All posts (optional ?status=, ?category=, ?q=)
    create: POST /api/v1/admin/posts/
    retrieve: GET /api/v1/admin/posts/{id}/
    update: PATCH /api/v1/admin/posts/{id}/
    destroy: DELETE /api/v1/admin/posts/{id}/
    share_facebook: POST /api/v1/admin/posts/{id}/share-facebook/
    """
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = Post.objects.with_relations().order_by('-created_at', '-id')
        params = self.request.query_params
        if params.get('status'):
            qs = qs.filter(status=params['status'])
        if params.get('category'):
            qs = qs.filter(category_id=params['category'])
        if params.get('q'):
            qs = qs.filter(title__icontains=params['q'])
        return qs

    def get_serializer_class(self):
        if self.action in ('create', 'update', 'partial_update'):
            return PostWriteSerializer
        if self.action == 'list':
            return PostListSerializer
        return PostDetailSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            post = create_post(serializer.validated_data)
        except SlugConflictError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        return Response(PostDetailSerializer(post).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        post = self.get_object()
        serializer = self.get_serializer(post, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        try:
            post = update_post(post, serializer.validated_data)
        except SlugConflictError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        return Response(PostDetailSerializer(post).data)

    def destroy(self, request, *args, **kwargs):
        """
        Delete a post. The image's CDN public id is returned so the caller can
        remove it from the image CDN.
        """
        image_public_id = delete_post(self.get_object())
        return Response(
            {'message': 'Post deleted', 'image_public_id': image_public_id},
            status=status.HTTP_200_OK
        )

    @action(detail=True, methods=['post'], url_path='share-facebook')
    def share_facebook(self, request, pk=None):
        """
        POST /api/v1/admin/posts/{id}/share-facebook/
        Shares a published post to the connected Facebook page.
        """
        post = self.get_object()
        if not post.is_published:
            return Response({'error': 'Only published posts can be shared'},
                            status=status.HTTP_400_BAD_REQUEST)

        publisher = FacebookPublisher.from_settings()
        if not publisher.available:
            return Response({'error': 'Facebook page is not connected'},
                            status=status.HTTP_400_BAD_REQUEST)

        try:
            result = publisher.share(post)
        except FacebookError as e:
            logger.error(f"Manual Facebook share of post {post.pk} failed: {e}")
            return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)

        return Response({'success': True, 'facebook_post_id': result.get('id') or result.get('post_id')})
