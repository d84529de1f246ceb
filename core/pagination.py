from rest_framework.pagination import PageNumberPagination

from core.responses import success_response


class EnvelopePageNumberPagination(PageNumberPagination):
    """Page-number pagination wrapped in the standard success envelope."""

    page_size_query_param = 'page_size'
    max_page_size = 200

    def get_paginated_response(self, data):
        return success_response({
            'count': self.page.paginator.count,
            'next': self.get_next_link(),
            'previous': self.get_previous_link(),
            'results': data,
        })
