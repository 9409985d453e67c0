from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from applications.serializers import ApplicationDetailSerializer
from applications.services import ApplicationService
from base.pagination import CustomPagination
from base.permissions import IsRecruiter, can_manage_application
from base.utils import create_permission_class_with_admin_override, error_response, forbidden_response
from .serializers import InterviewSerializer
from .services import InterviewService

AdminOrRecruiter = create_permission_class_with_admin_override(IsRecruiter)

envelope_schema = openapi.Schema(
    type=openapi.TYPE_OBJECT,
    properties={
        'message': openapi.Schema(type=openapi.TYPE_STRING),
        'status': openapi.Schema(type=openapi.TYPE_INTEGER),
        'data': openapi.Schema(type=openapi.TYPE_OBJECT)
    }
)
error_schema = openapi.Schema(
    type=openapi.TYPE_OBJECT,
    properties={
        'message': openapi.Schema(type=openapi.TYPE_STRING),
        'status': openapi.Schema(type=openapi.TYPE_INTEGER),
        'errors': openapi.Schema(type=openapi.TYPE_OBJECT)
    }
)


def _check_manager(request, application_id):
    application = ApplicationService.get_application(application_id)
    return can_manage_application(request.user, application)


def _application_response(application, message, status_code=status.HTTP_200_OK):
    return Response({
        'message': message,
        'status': status_code,
        'data': ApplicationDetailSerializer(application, context={'is_recruiter': True}).data
    }, status=status_code)


@swagger_auto_schema(
    method='post',
    operation_description="Lên lịch phỏng vấn cho đơn ứng tuyển",
    request_body=openapi.Schema(
        type=openapi.TYPE_OBJECT,
        required=['type', 'scheduled_date', 'scheduled_time', 'is_online'],
        properties={
            'type': openapi.Schema(type=openapi.TYPE_STRING, enum=['online', 'offline', 'phone', 'technical', 'hr', 'final']),
            'scheduled_date': openapi.Schema(type=openapi.TYPE_STRING, format=openapi.FORMAT_DATE, description="Ngày phỏng vấn (YYYY-MM-DD)"),
            'scheduled_time': openapi.Schema(type=openapi.TYPE_STRING, description="Giờ phỏng vấn (HH:MM)"),
            'duration': openapi.Schema(type=openapi.TYPE_INTEGER, description="Thời lượng (phút), mặc định 60"),
            'is_online': openapi.Schema(type=openapi.TYPE_BOOLEAN, description="Phỏng vấn trực tuyến"),
            'meeting_link': openapi.Schema(type=openapi.TYPE_STRING, description="Link phỏng vấn trực tuyến"),
            'meeting_platform': openapi.Schema(type=openapi.TYPE_STRING, enum=['zoom', 'google_meet', 'microsoft_teams', 'other']),
            'location': openapi.Schema(type=openapi.TYPE_STRING, description="Địa điểm phỏng vấn"),
            'room_number': openapi.Schema(type=openapi.TYPE_STRING),
            'contact_person': openapi.Schema(type=openapi.TYPE_STRING),
            'contact_phone': openapi.Schema(type=openapi.TYPE_STRING),
            'instructions': openapi.Schema(type=openapi.TYPE_STRING),
            'send_notification': openapi.Schema(type=openapi.TYPE_BOOLEAN, default=True),
        }
    ),
    responses={
        201: openapi.Response(description="Lịch phỏng vấn được tạo thành công", schema=envelope_schema),
        400: openapi.Response(description="Lỗi tạo lịch phỏng vấn", schema=error_schema),
        404: openapi.Response(description="Đơn ứng tuyển không tồn tại"),
    },
    security=[{'Bearer': []}]
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def schedule_interview(request, application_id):
    if not _check_manager(request, application_id):
        return forbidden_response('You are not authorized to schedule interviews for this application')
    data = dict(request.data.items())
    notify = data.pop('send_notification', True) not in (False, 'false', 'False', '0')
    try:
        application = InterviewService.schedule(application_id, data, scheduled_by=request.user, notify=notify)
    except ValidationError as e:
        return error_response('Lên lịch phỏng vấn thất bại', e.detail)
    return _application_response(application, 'Interview scheduled successfully', status.HTTP_201_CREATED)


@swagger_auto_schema(
    method='patch',
    operation_description="Dời lịch phỏng vấn (bắt buộc có lý do)",
    request_body=openapi.Schema(
        type=openapi.TYPE_OBJECT,
        required=['new_date', 'new_time', 'reason'],
        properties={
            'new_date': openapi.Schema(type=openapi.TYPE_STRING, format=openapi.FORMAT_DATE),
            'new_time': openapi.Schema(type=openapi.TYPE_STRING, description="HH:MM"),
            'reason': openapi.Schema(type=openapi.TYPE_STRING),
        }
    ),
    responses={
        200: openapi.Response(description="Interview rescheduled", schema=envelope_schema),
        400: openapi.Response(description="Bad request", schema=error_schema),
        404: openapi.Response(description="Application or interview not found"),
    },
    security=[{'Bearer': []}]
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def reschedule_interview(request, application_id, interview_id):
    if not _check_manager(request, application_id):
        return forbidden_response()
    try:
        application = InterviewService.reschedule(
            application_id,
            interview_id,
            request.data.get('new_date'),
            request.data.get('new_time'),
            request.data.get('reason'),
            rescheduled_by=request.user,
        )
    except ValidationError as e:
        return error_response('Dời lịch phỏng vấn thất bại', e.detail)
    return _application_response(application, 'Interview rescheduled successfully')


@swagger_auto_schema(
    method='patch',
    operation_description="Hủy lịch phỏng vấn, đơn ứng tuyển quay về trạng thái Reviewed",
    request_body=openapi.Schema(
        type=openapi.TYPE_OBJECT,
        properties={'reason': openapi.Schema(type=openapi.TYPE_STRING)}
    ),
    responses={
        200: openapi.Response(description="Interview cancelled", schema=envelope_schema),
        404: openapi.Response(description="Application or interview not found"),
    },
    security=[{'Bearer': []}]
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def cancel_interview(request, application_id, interview_id):
    if not _check_manager(request, application_id):
        return forbidden_response()
    application = InterviewService.cancel(
        application_id, interview_id, request.data.get('reason', ''), cancelled_by=request.user
    )
    return _application_response(application, 'Interview cancelled successfully')


@swagger_auto_schema(
    method='post',
    operation_description="Gửi nhận xét sau phỏng vấn, đơn chuyển sang Interview Completed",
    request_body=openapi.Schema(
        type=openapi.TYPE_OBJECT,
        properties={
            'rating': openapi.Schema(type=openapi.TYPE_INTEGER, description="1-5"),
            'strengths': openapi.Schema(type=openapi.TYPE_ARRAY, items=openapi.Schema(type=openapi.TYPE_STRING)),
            'improvements': openapi.Schema(type=openapi.TYPE_ARRAY, items=openapi.Schema(type=openapi.TYPE_STRING)),
            'recommendation': openapi.Schema(type=openapi.TYPE_STRING, enum=['hire', 'reject', 'next_round', 'hold']),
            'comments': openapi.Schema(type=openapi.TYPE_STRING),
        }
    ),
    responses={
        200: openapi.Response(description="Feedback submitted", schema=envelope_schema),
        400: openapi.Response(description="Bad request", schema=error_schema),
    },
    security=[{'Bearer': []}]
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def submit_interview_feedback(request, application_id, interview_id):
    if not _check_manager(request, application_id):
        return forbidden_response()
    try:
        application = InterviewService.submit_feedback(
            application_id, interview_id, request.data, submitted_by=request.user
        )
    except ValidationError as e:
        return error_response('Gửi nhận xét thất bại', e.detail)
    return _application_response(application, 'Interview feedback submitted successfully')


@swagger_auto_schema(
    method='get',
    operation_description="Danh sách phỏng vấn sắp diễn ra trong N ngày tới (mặc định 7)",
    manual_parameters=[
        openapi.Parameter('days', openapi.IN_QUERY, description="Số ngày tới", type=openapi.TYPE_INTEGER),
    ],
    responses={200: openapi.Response(description="Upcoming interviews", schema=envelope_schema)},
    security=[{'Bearer': []}]
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, AdminOrRecruiter])
def get_upcoming_interviews(request):
    try:
        days = int(request.query_params.get('days', 7))
    except ValueError:
        return error_response('Invalid query parameter', {'days': ['A valid integer is required.']})

    post_ids = None
    if not request.user.is_staff:
        post_ids = list(request.user.enterprises.values_list('posts__id', flat=True))
    interviews = ApplicationService.get_upcoming_interviews(days=days, post_ids=post_ids)

    paginator = CustomPagination(message='Upcoming interviews retrieved successfully')
    paginated = paginator.paginate_queryset(interviews, request)
    serializer = InterviewSerializer(paginated, many=True)
    return paginator.get_paginated_response(serializer.data)
