"""Notification ViewSets"""

from rest_framework import filters, mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from .filters import NotificationFilter
from .models import Notification
from .serializers import MarkReadSerializer, NotificationSerializer
from .services import NotificationService


class NotificationViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """The requesting user's own notifications."""

    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = NotificationFilter
    search_fields = ['title', 'message']
    ordering_fields = ['is_read', 'priority', 'created_at']
    ordering = ['-created_at']

    def get_queryset(self):
        return Notification.objects.filter(recipient=self.request.user)

    @action(detail=True, methods=['post'], url_path='read')
    def mark_read(self, request, pk=None):
        if not NotificationService.mark_as_read(pk, request.user):
            return Response({'detail': 'Not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response({'status': 'read'})

    @action(detail=False, methods=['post'], url_path='mark-read')
    def mark_read_by_body(self, request):
        serializer = MarkReadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self.mark_read(request, pk=serializer.validated_data['id'])

    @action(detail=False, methods=['post'], url_path='read-all')
    def mark_all_read(self, request):
        return Response({'updated': NotificationService.mark_all_as_read(request.user)})

    @action(detail=False, methods=['get'], url_path='unread-count')
    def unread_count(self, request):
        return Response({'unread_count': NotificationService.unread_count(request.user)})

    @action(detail=False, methods=['get'], url_path='latest')
    def latest(self, request):
        notifications = NotificationService.for_user(request.user, limit=5)
        return Response({
            'notifications': NotificationSerializer(notifications, many=True).data,
            'unread_count': NotificationService.unread_count(request.user),
        })
