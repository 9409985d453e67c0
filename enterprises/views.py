from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from base.utils import error_response
from .models import JobAlertCriteria
from .serializers import JobAlertCriteriaSerializer


@swagger_auto_schema(
    method='get',
    operation_description='Lấy tiêu chí nhận job alert của người dùng đang đăng nhập',
    responses={200: JobAlertCriteriaSerializer, 404: 'Chưa có tiêu chí'},
    security=[{'Bearer': []}]
)
@swagger_auto_schema(
    method='put',
    operation_description='Tạo hoặc cập nhật tiêu chí nhận job alert',
    request_body=JobAlertCriteriaSerializer,
    responses={200: JobAlertCriteriaSerializer, 400: 'Dữ liệu không hợp lệ'},
    security=[{'Bearer': []}]
)
@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def job_alert_criteria(request):
    criteria = JobAlertCriteria.objects.filter(user=request.user).first()

    if request.method == 'GET':
        if not criteria:
            return Response({
                'message': 'You have not set up job alerts yet',
                'status': status.HTTP_404_NOT_FOUND
            }, status=status.HTTP_404_NOT_FOUND)
        return Response({
            'message': 'Data retrieved successfully',
            'status': status.HTTP_200_OK,
            'data': JobAlertCriteriaSerializer(criteria).data
        })

    serializer = JobAlertCriteriaSerializer(criteria, data=request.data, partial=criteria is not None)
    if not serializer.is_valid():
        return error_response('Invalid job alert criteria', serializer.errors)
    serializer.save(user=request.user)
    return Response({
        'message': 'Job alert criteria saved successfully',
        'status': status.HTTP_200_OK,
        'data': serializer.data
    })
