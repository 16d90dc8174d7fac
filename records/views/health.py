import logging

from django.db import DatabaseError, connections
from django.http import JsonResponse
from django.utils import timezone

logger = logging.getLogger(__name__)


def healthz(request):
    now = timezone.now().isoformat()
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
        return JsonResponse({'ok': True, 'db': bool(row and row[0] == 1), 'timestamp': now})
    except DatabaseError as e:
        logger.warning('health check failed: %s', e)
        return JsonResponse({'ok': False, 'db': False, 'error': str(e), 'timestamp': now}, status=503)
