"""
Custom Pagination Classes
"""

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardResultsPagination(PageNumberPagination):
    """Page-number pagination rendered inside the API envelope"""

    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100

    def _pagination_meta(self):
        paginator = self.page.paginator
        return {
            'count': paginator.count,
            'total_pages': paginator.num_pages,
            'current_page': self.page.number,
            'page_size': self.get_page_size(self.request),
            'next': self.get_next_link(),
            'previous': self.get_previous_link(),
        }

    def get_paginated_response(self, data):
        return Response({'success': True, 'data': data, 'pagination': self._pagination_meta()})

    def get_paginated_response_schema(self, schema):
        link = {'type': 'string', 'nullable': True, 'format': 'uri'}
        return {
            'type': 'object',
            'required': ['success', 'data', 'pagination'],
            'properties': {
                'success': {'type': 'boolean', 'example': True},
                'data': schema,
                'pagination': {
                    'type': 'object',
                    'properties': {
                        'count': {'type': 'integer', 'example': 42},
                        'total_pages': {'type': 'integer', 'example': 3},
                        'current_page': {'type': 'integer', 'example': 1},
                        'page_size': {'type': 'integer', 'example': 20},
                        'next': link,
                        'previous': link,
                    },
                },
            },
        }
