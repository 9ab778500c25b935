from django.shortcuts import get_object_or_404
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Notification
from .serializers import NotificationSerializer
from .services import mark_read


class NotificationListView(APIView):
    def get(self, request):
        qs = Notification.objects.filter(to_user=request.user)
        if request.query_params.get("unread") in ("1", "true"):
            qs = qs.filter(is_read=False)
        return Response(NotificationSerializer(qs[:100], many=True).data)


class NotificationReadView(APIView):
    def post(self, request, pk: int):
        # other users' notifications look missing
        note = get_object_or_404(Notification, pk=pk, to_user=request.user)
        return Response(NotificationSerializer(mark_read(note)).data)
