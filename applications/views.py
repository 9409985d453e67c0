import logging

from django.shortcuts import get_object_or_404
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from base.pagination import CustomPagination
from base.permissions import can_manage_application, can_view_application, is_post_owner
from base.utils import error_response, forbidden_response
from enterprises.models import PostEntity
from .models import APPLICATION_STATUS, Application
from .serializers import (
    ApplicationDetailSerializer,
    ApplicationListSerializer,
    ApplySerializer,
    EvaluationSerializer,
    OfferDetailsSerializer,
    StatusUpdateSerializer,
)
from .services import ApplicationService

logger = logging.getLogger(__name__)

envelope_schema = openapi.Schema(
    type=openapi.TYPE_OBJECT,
    properties={
        'message': openapi.Schema(type=openapi.TYPE_STRING),
        'status': openapi.Schema(type=openapi.TYPE_INTEGER),
        'data': openapi.Schema(type=openapi.TYPE_OBJECT),
    }
)
error_schema = openapi.Schema(
    type=openapi.TYPE_OBJECT,
    properties={
        'message': openapi.Schema(type=openapi.TYPE_STRING),
        'status': openapi.Schema(type=openapi.TYPE_INTEGER),
        'errors': openapi.Schema(type=openapi.TYPE_OBJECT),
    }
)
not_found_schema = openapi.Schema(
    type=openapi.TYPE_OBJECT,
    properties={
        'detail': openapi.Schema(type=openapi.TYPE_STRING)
    }
)


def _detail_response(application, request, message, status_code=status.HTTP_200_OK):
    serializer = ApplicationDetailSerializer(
        application, context={'is_recruiter': can_manage_application(request.user, application)}
    )
    return Response({
        'message': message,
        'status': status_code,
        'data': serializer.data
    }, status=status_code)


@swagger_auto_schema(
    method='post',
    operation_description="Ứng tuyển vào một tin tuyển dụng",
    request_body=openapi.Schema(
        type=openapi.TYPE_OBJECT,
        required=['post_id'],
        properties={
            'post_id': openapi.Schema(type=openapi.TYPE_INTEGER, description="ID tin tuyển dụng"),
            'cover_letter': openapi.Schema(type=openapi.TYPE_STRING, description="Thư giới thiệu"),
            'source': openapi.Schema(type=openapi.TYPE_STRING, description="Nguồn ứng tuyển"),
            'referral_code': openapi.Schema(type=openapi.TYPE_STRING, description="Mã giới thiệu"),
        }
    ),
    responses={
        201: openapi.Response(description="Application submitted", schema=envelope_schema),
        400: openapi.Response(description="Bad request", schema=error_schema),
        404: openapi.Response(description="Job not found", schema=not_found_schema),
    },
    security=[{'Bearer': []}]
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def apply_to_job(request):
    serializer = ApplySerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Invalid application data', serializer.errors)
    data = serializer.validated_data
    try:
        application = ApplicationService.apply_to_job(
            post_id=data['post_id'],
            user_id=request.user.id,
            cover_letter=data['cover_letter'],
            source=data['source'],
            referral_code=data['referral_code'],
        )
    except ValidationError as e:
        return error_response('Application failed', e.detail)
    return _detail_response(application, request, 'Application submitted successfully', status.HTTP_201_CREATED)


@swagger_auto_schema(
    method='get',
    operation_description="Lấy danh sách đơn ứng tuyển của người dùng đang đăng nhập",
    manual_parameters=[
        openapi.Parameter('status', openapi.IN_QUERY, description="Lọc theo trạng thái", type=openapi.TYPE_STRING),
        openapi.Parameter('page', openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
        openapi.Parameter('page_size', openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
    ],
    responses={200: openapi.Response(description="Danh sách đơn ứng tuyển", schema=envelope_schema)},
    security=[{'Bearer': []}]
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_my_applications(request):
    applications = Application.objects.filter(user=request.user).select_related('post__enterprise', 'post__field')
    status_filter = request.query_params.get('status')
    if status_filter:
        applications = applications.filter(status=status_filter)

    paginator = CustomPagination(message='Applications retrieved successfully')
    paginated = paginator.paginate_queryset(applications, request)
    serializer = ApplicationListSerializer(paginated, many=True)
    return paginator.get_paginated_response(serializer.data)


@swagger_auto_schema(
    method='get',
    operation_description="Chi tiết đơn ứng tuyển kèm lịch sử trạng thái, phỏng vấn, đánh giá, offer",
    responses={
        200: openapi.Response(description="Application detail", schema=envelope_schema),
        404: openapi.Response(description="Application not found", schema=not_found_schema),
    },
    security=[{'Bearer': []}]
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_application_detail(request, pk):
    application = ApplicationService.get_application_with_timeline(pk)
    if not can_view_application(request.user, application):
        return forbidden_response('You are not authorized to view this application')
    return _detail_response(application, request, 'Data retrieved successfully')


@swagger_auto_schema(
    method='patch',
    operation_description="""
    Cập nhật trạng thái đơn ứng tuyển (nhà tuyển dụng).
    Mọi trạng thái đều có thể chuyển sang nhau; mỗi lần chuyển thêm một bản ghi lịch sử.
    """,
    request_body=openapi.Schema(
        type=openapi.TYPE_OBJECT,
        required=['status'],
        properties={
            'status': openapi.Schema(
                type=openapi.TYPE_STRING,
                enum=[key for key, _ in APPLICATION_STATUS],
            ),
            'notes': openapi.Schema(type=openapi.TYPE_STRING),
            'send_notification': openapi.Schema(type=openapi.TYPE_BOOLEAN, default=True),
        }
    ),
    responses={
        200: openapi.Response(description="Status updated", schema=envelope_schema),
        400: openapi.Response(description="Invalid status", schema=error_schema),
        403: openapi.Response(description="Forbidden"),
        404: openapi.Response(description="Application not found", schema=not_found_schema),
    },
    security=[{'Bearer': []}]
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def update_application_status(request, pk):
    application = ApplicationService.get_application(pk)
    if not can_manage_application(request.user, application):
        return forbidden_response('You are not authorized to update this application')

    serializer = StatusUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Cập nhật trạng thái thất bại', serializer.errors)

    data = serializer.validated_data
    application = ApplicationService.update_status(
        pk,
        data['status'],
        notes=data['notes'],
        changed_by=request.user,
        send_notification=data['send_notification'],
    )
    return _detail_response(application, request, 'Cập nhật trạng thái thành công')


@swagger_auto_schema(
    method='patch',
    operation_description="Cập nhật ghi chú nội bộ của nhà tuyển dụng",
    request_body=openapi.Schema(
        type=openapi.TYPE_OBJECT,
        properties={'notes': openapi.Schema(type=openapi.TYPE_STRING)}
    ),
    responses={200: openapi.Response(description="Notes updated", schema=envelope_schema)},
    security=[{'Bearer': []}]
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def update_internal_notes(request, pk):
    application = ApplicationService.get_application(pk)
    if not can_manage_application(request.user, application):
        return forbidden_response()
    ApplicationService.add_internal_notes(pk, request.data.get('notes', ''))
    return Response({
        'message': 'Internal notes updated successfully',
        'status': status.HTTP_200_OK,
        'data': {'id': pk, 'internal_notes': request.data.get('notes', '')}
    })


@swagger_auto_schema(
    method='post',
    operation_description="Thêm đánh giá ứng viên (điểm 1-10)",
    request_body=EvaluationSerializer,
    responses={
        201: openapi.Response(description="Evaluation added", schema=envelope_schema),
        400: openapi.Response(description="Bad request", schema=error_schema),
    },
    security=[{'Bearer': []}]
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def add_evaluation(request, pk):
    application = ApplicationService.get_application(pk)
    if not can_manage_application(request.user, application):
        return forbidden_response()
    try:
        evaluation = ApplicationService.add_evaluation(pk, request.user, **request.data)
    except ValidationError as e:
        return error_response('Thêm đánh giá thất bại', e.detail)
    return Response({
        'message': 'Evaluation added successfully',
        'status': status.HTTP_201_CREATED,
        'data': EvaluationSerializer(evaluation).data
    }, status=status.HTTP_201_CREATED)


@swagger_auto_schema(
    method='put',
    operation_description="Tạo / cập nhật thông tin offer của đơn ứng tuyển",
    request_body=OfferDetailsSerializer,
    responses={
        200: openapi.Response(description="Offer details saved", schema=envelope_schema),
        400: openapi.Response(description="Bad request", schema=error_schema),
    },
    security=[{'Bearer': []}]
)
@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def set_offer_details(request, pk):
    application = ApplicationService.get_application(pk)
    if not can_manage_application(request.user, application):
        return forbidden_response()
    try:
        offer = ApplicationService.set_offer_details(pk, **request.data)
    except ValidationError as e:
        return error_response('Lưu thông tin offer thất bại', e.detail)
    return Response({
        'message': 'Offer details saved successfully',
        'status': status.HTTP_200_OK,
        'data': OfferDetailsSerializer(offer).data
    })


@swagger_auto_schema(
    method='get',
    operation_description="Đếm số đơn ứng tuyển theo từng trạng thái của một tin tuyển dụng",
    responses={200: openapi.Response(description="Counts by status", schema=envelope_schema)},
    security=[{'Bearer': []}]
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def count_applications_by_status(request, post_id):
    post = get_object_or_404(PostEntity.objects.select_related('enterprise'), pk=post_id)
    if not (request.user.is_staff or is_post_owner(request.user, post)):
        return forbidden_response()
    return Response({
        'message': 'Data retrieved successfully',
        'status': status.HTTP_200_OK,
        'data': ApplicationService.count_by_status(post_id)
    })
