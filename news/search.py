"""
Post search: ranked full-text strategy with a substring fallback.

Flow for ``search(query_text, page)``:

  EMPTY_QUERY  blank text, answered without touching the database
  RANKED       PostgreSQL full-text search ordered by relevance then recency
  FALLBACK     case-insensitive substring / tag match ordered by recency,
               used only when the ranked strategy reports SearchIndexMissing
  DONE         results packaged into a SearchResult

Both strategies paginate the same way and return the same SearchResult shape;
only the ordering differs. Errors other than a missing index propagate.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import List, Tuple

from django.db.models import Q

from .models import Post
from .search_index import SEARCH_CONFIG, SEARCH_INDEX_NAME, search_index_exists, search_vector

logger = logging.getLogger(__name__)

PAGE_SIZE = 10
MAX_PAGE = 10000


class SearchIndexMissing(Exception):
    """The full-text index the ranked strategy depends on is not available."""


def should_fallback(error: BaseException) -> bool:
    """Only a missing text index downgrades search to the fallback strategy."""
    return isinstance(error, SearchIndexMissing)


def normalize_page(value) -> int:
    try:
        page = int(str(value).strip())
    except (TypeError, ValueError):
        return 1
    return min(max(page, 1), MAX_PAGE)


@dataclass(frozen=True)
class SearchQuery:
    text: str
    page: int = 1

    @classmethod
    def from_params(cls, text, page=None) -> 'SearchQuery':
        return cls(text=(text or '').strip(), page=normalize_page(page))

    @property
    def is_empty(self) -> bool:
        return not self.text

    def bounds(self, page_size: int) -> Tuple[int, int]:
        start = (self.page - 1) * page_size
        return start, start + page_size


@dataclass(frozen=True)
class SearchResult:
    page: int
    total_pages: int
    total_count: int
    items: List[Post] = field(default_factory=list)
    resolved_query: str = ''

    @classmethod
    def empty(cls) -> 'SearchResult':
        return cls(page=1, total_pages=1, total_count=0, items=[], resolved_query='')


def total_pages_for(total_count: int, page_size: int = PAGE_SIZE) -> int:
    return max(1, math.ceil(total_count / page_size))


class RankedStrategy:
    """Relevance-ranked search over the GIN text index."""

    name = 'ranked'

    def __init__(self, using: str = 'default'):
        self.using = using

    def index_available(self) -> bool:
        return search_index_exists(self.using)

    def querysets(self, query: SearchQuery):
        """Return the (matches, ordered) querysets; nothing is executed here."""
        from django.contrib.postgres.search import SearchQuery as TextQuery, SearchRank

        text_query = TextQuery(query.text, config=SEARCH_CONFIG, search_type='websearch')
        matches = (
            Post.objects.using(self.using)
            .published()
            .annotate(document=search_vector())
            .filter(document=text_query)
        )
        ordered = (
            matches.annotate(rank=SearchRank(search_vector(), text_query))
            .order_by('-rank', '-published_at', '-id')
            .with_relations()
        )
        return matches, ordered

    def run(self, query: SearchQuery, page_size: int) -> Tuple[List[Post], int]:
        if not self.index_available():
            raise SearchIndexMissing(f"Text index {SEARCH_INDEX_NAME} does not exist")

        matches, ordered = self.querysets(query)
        total = matches.count()

        start, end = query.bounds(page_size)
        items = list(ordered[start:end])
        return items, total


class FallbackStrategy:
    """Substring match over title, excerpt and body, or an exact tag match."""

    name = 'fallback'

    def __init__(self, using: str = 'default'):
        self.using = using

    @staticmethod
    def predicate(text: str) -> Q:
        return (
            Q(title__icontains=text)
            | Q(excerpt__icontains=text)
            | Q(body__icontains=text)
            | Q(tags__name=text.lower())
        )

    def run(self, query: SearchQuery, page_size: int) -> Tuple[List[Post], int]:
        matches = (
            Post.objects.using(self.using)
            .published()
            .filter(self.predicate(query.text))
            .distinct()
        )
        total = matches.count()

        start, end = query.bounds(page_size)
        items = list(matches.order_by('-published_at', '-id').with_relations()[start:end])
        return items, total


class SearchEngine:
    """Runs the ranked strategy and falls back when its index is missing."""

    def __init__(self, ranked=None, fallback=None, page_size: int = PAGE_SIZE):
        self.ranked = ranked or RankedStrategy()
        self.fallback = fallback or FallbackStrategy()
        self.page_size = page_size

    def search(self, query_text, page=1) -> SearchResult:
        query = SearchQuery.from_params(query_text, page)
        if query.is_empty:
            return SearchResult.empty()

        try:
            items, total = self.ranked.run(query, self.page_size)
        except Exception as exc:
            if not should_fallback(exc):
                raise
            logger.warning(f"Search degraded to {self.fallback.name} strategy: {exc}")
            items, total = self.fallback.run(query, self.page_size)

        return SearchResult(
            page=query.page,
            total_pages=total_pages_for(total, self.page_size),
            total_count=total,
            items=items,
            resolved_query=query.text,
        )


def search(query_text, page=1) -> SearchResult:
    """Search published posts; see module docstring for the strategy flow."""
    return SearchEngine().search(query_text, page)
