import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.http import HttpResponse
from django.utils import timezone

from .datasets import DATASETS
from .exporters import export_excel, export_csv, export_pdf
from .services import get_dashboard_kpis, get_inventory_status, get_monthly_trend, get_vendor_analytics

logger = logging.getLogger(__name__)

EXPORT_CONTENT_TYPES = {
    'xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'csv': 'text/csv; charset=utf-8',
    'pdf': 'application/pdf',
}


def _year_param(request):
    year = request.query_params.get('year', None)
    if not year:
        return timezone.localdate().year
    return int(year)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_kpis(request):
    """Dashboard KPIs for the current month"""
    today = timezone.localdate()
    return Response(get_dashboard_kpis(today.year, today.month))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_status(request):
    """Stock per category, status buckets and the most short products"""
    return Response(get_inventory_status())


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def monthly_trend(request):
    try:
        year = _year_param(request)
    except ValueError:
        return Response({'year': 'Year must be a number'}, status=status.HTTP_400_BAD_REQUEST)
    return Response(get_monthly_trend(year))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def vendor_analytics(request):
    try:
        year = _year_param(request)
    except ValueError:
        return Response({'year': 'Year must be a number'}, status=status.HTTP_400_BAD_REQUEST)
    return Response(get_vendor_analytics(year))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def export_dataset(request, dataset):
    """
    Download a dataset as xlsx, csv or pdf.

    ``?stats=true`` adds a Statistics sheet to Excel exports.
    """
    builder = DATASETS.get(dataset)
    if builder is None:
        return Response({'detail': f'Unknown dataset {dataset}'}, status=status.HTTP_404_NOT_FOUND)

    file_format = request.query_params.get('format', 'xlsx').lower()
    if file_format not in EXPORT_CONTENT_TYPES:
        return Response({'format': 'Use xlsx, csv or pdf'}, status=status.HTTP_400_BAD_REQUEST)

    title, headers, rows = builder()
    if file_format == 'xlsx':
        include_statistics = request.query_params.get('stats', '').lower() in ('1', 'true', 'yes')
        content = export_excel(title, headers, rows, include_statistics=include_statistics)
    elif file_format == 'csv':
        content = export_csv(headers, rows)
    else:
        content = export_pdf(title, headers, rows)

    filename = f"{dataset}_{timezone.localdate():%Y-%m-%d}.{file_format}"
    logger.info(f"Exported {dataset} ({len(rows)} rows) as {file_format}")
    response = HttpResponse(content, content_type=EXPORT_CONTENT_TYPES[file_format])
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response
