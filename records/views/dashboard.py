"""
Dashboard statistics and risk analysis endpoints.

Both are computed on demand from a snapshot of the caller's records;
nothing is cached or stored.
"""
from __future__ import annotations

from dataclasses import asdict

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..services.analysis import compute_analysis, compute_stats
from ..services.records import snapshot


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_stats(request):
    """Counts and averages for the caller's dashboard cards."""
    return Response(asdict(compute_stats(snapshot(request.user))))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def analysis(request):
    """Cholesterol range plus every record carrying at least one risk flag."""
    return Response(asdict(compute_analysis(snapshot(request.user))))
