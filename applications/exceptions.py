from rest_framework.exceptions import NotFound


class ApplicationNotFound(NotFound):
    default_detail = 'Application not found'
    default_code = 'application_not_found'


class InterviewNotFound(NotFound):
    default_detail = 'Interview not found'
    default_code = 'interview_not_found'


class StatusChangeNotAllowed(Exception):
    """Trạng thái đơn chỉ được đổi qua ApplicationService.transition"""


class LedgerEntryImmutable(Exception):
    """Bản ghi lịch sử trạng thái đã ghi thì không được sửa"""
