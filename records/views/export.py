from django.http import HttpResponse
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..services.export import pdf_filename, render_record_pdf, render_records_csv
from ..services.records import get_record, snapshot


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def record_pdf(request, pk: int):
    record = get_record(request.user, pk)
    resp = HttpResponse(render_record_pdf(record), content_type='application/pdf')
    resp['Content-Disposition'] = f'attachment; filename="{pdf_filename(record)}"'
    return resp


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def export_csv(request):
    resp = HttpResponse(render_records_csv(snapshot(request.user)), content_type='text/csv; charset=utf-8')
    resp['Content-Disposition'] = 'attachment; filename="medical_records.csv"'
    return resp
