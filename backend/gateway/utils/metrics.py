"""
Prometheus metrics definitions.
All metrics are registered here and can be imported by other modules.
"""
from prometheus_client import Counter, Histogram

# HTTP request metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'path', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'path'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Error metrics
errors_total = Counter(
    'errors_total',
    'Total errors',
    ['error_type']
)

# Object store metrics
storage_requests_total = Counter(
    'storage_requests_total',
    'Total signed requests sent to the object store',
    ['operation', 'outcome']
)

storage_request_duration_seconds = Histogram(
    'storage_request_duration_seconds',
    'Object store request duration in seconds',
    ['operation'],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0]
)

# Attachment metrics
attachments_uploaded_total = Counter(
    'attachments_uploaded_total',
    'Total attachments uploaded and recorded'
)

attachments_deleted_total = Counter(
    'attachments_deleted_total',
    'Total attachment rows deleted'
)
