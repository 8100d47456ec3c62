from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.utils.dateparse import parse_datetime
from .models import Notification
from .serializers import NotificationSerializer

FEED_LIMIT = 50


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_list(request):
    """
    Latest notifications, newest first.

    ``since`` (ISO datetime) returns only rows created after it, so clients
    can poll for new notifications.
    """
    queryset = Notification.objects.all()

    since = request.query_params.get('since', None)
    if since:
        since_dt = parse_datetime(since.replace(' ', '+'))
        if since_dt is None:
            return Response({'detail': 'since must be an ISO 8601 datetime'}, status=status.HTTP_400_BAD_REQUEST)
        queryset = queryset.filter(created_at__gt=since_dt)

    type_filter = request.query_params.get('type', None)
    if type_filter:
        queryset = queryset.filter(type=type_filter)

    unread_only = request.query_params.get('unread', None)
    if unread_only and unread_only.lower() == 'true':
        queryset = queryset.filter(read=False)

    notifications = queryset.order_by('-created_at', '-id')[:FEED_LIMIT]
    return Response({
        'results': NotificationSerializer(notifications, many=True).data,
        'unread_count': Notification.objects.filter(read=False).count(),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_unread_count(request):
    return Response({'unread_count': Notification.objects.filter(read=False).count()})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_read(request, pk):
    notification = get_object_or_404(Notification, pk=pk)
    if not notification.read:
        notification.read = True
        notification.save(update_fields=['read'])
    return Response(NotificationSerializer(notification).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_all_read(request):
    updated = Notification.objects.filter(read=False).update(read=True)
    return Response({'updated': updated, 'unread_count': 0})
