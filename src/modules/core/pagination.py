from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """Page-number pagination for catalog and directory listings."""

    page_size_query_param = "page_size"
    max_page_size = 100
