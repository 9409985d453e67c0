from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class CustomPagination(PageNumberPagination):
    """Phân trang trả về theo khuôn {message, status, data: {total, page, ..., results}}"""
    page_size = 10
    page_size_query_param = 'page_size'
    max_page_size = 100
    message = 'Data retrieved successfully'

    def __init__(self, message=None):
        if message:
            self.message = message

    def get_paginated_response(self, data):
        return Response({
            'message': self.message,
            'status': 200,
            'data': {
                'total': self.page.paginator.count,
                'page': self.page.number,
                'total_pages': self.page.paginator.num_pages,
                'page_size': self.get_page_size(self.request),
                'results': data
            }
        })

    def get_paginated_response_schema(self, schema):
        return {
            'type': 'object',
            'properties': {
                'message': {'type': 'string', 'example': self.message},
                'status': {'type': 'integer', 'example': 200},
                'data': {
                    'type': 'object',
                    'properties': {
                        'total': {'type': 'integer'},
                        'page': {'type': 'integer'},
                        'total_pages': {'type': 'integer'},
                        'page_size': {'type': 'integer'},
                        'results': schema,
                    },
                },
            },
        }
