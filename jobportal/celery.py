import os
from celery import Celery

# Thiết lập biến môi trường Django
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'jobportal.settings')

# Tạo ứng dụng Celery
app = Celery('jobportal')

# Nạp cấu hình từ settings.py
app.config_from_object('django.conf:settings', namespace='CELERY')

# Tự động tìm và đăng ký các task trong tất cả các ứng dụng Django
app.autodiscover_tasks()
