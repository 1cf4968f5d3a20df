from prometheus_client import Counter, Histogram, generate_latest
from fastapi import Response

# Métricas HTTP
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

# Autenticación rechazada, por motivo
auth_failures_total = Counter(
    'auth_failures_total',
    'Rejected session tokens',
    ['reason']
)

db_queries_total = Counter('db_queries_total', 'Total database queries')

def metrics_endpoint():
    """Endpoint para métricas de Prometheus"""
    return Response(content=generate_latest(), media_type="text/plain")
