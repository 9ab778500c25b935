# service_orders/api/views.py
from django.conf import settings
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from account.identity import caller_from_user
from account.models import Role
from account.permissions import role_required
from vehicles.models import VehicleType

from ..exceptions import Forbidden
from ..models import ChecklistItem
from ..policies.orders import ServiceOrderPolicy
from ..selectors.orders import available_orders_for, get_order_for, orders_visible_to
from ..services import lifecycle
from ..services.audit import history_of
from ..services.checklist import checklist_for, complete_checklist_item, evaluate_checklist
from .serializers import (
    AssignOperatorSerializer,
    ChecklistCompleteSerializer,
    ChecklistEntrySerializer,
    ChecklistItemSerializer,
    NotesSerializer,
    OrderListQuerySerializer,
    ServiceOrderCreateSerializer,
    ServiceOrderSerializer,
    StatusChangeSerializer,
    StatusCheckSerializer,
    StatusHistorySerializer,
)


def _max_limit() -> int:
    return settings.SERVICE_ORDERS.get("MAX_LIST_LIMIT", 200)


def _clamp(limit):
    return min(limit or _max_limit(), _max_limit())


class ServiceOrderListCreateView(APIView):
    def get(self, request):
        q = OrderListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        orders = orders_visible_to(
            caller_from_user(request.user),
            status=q.validated_data.get("status") or None,
            limit=_clamp(q.validated_data.get("limit")),
        )
        return Response(ServiceOrderSerializer(orders, many=True).data)

    def post(self, request):
        ser = ServiceOrderCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        order = lifecycle.create_order(caller_from_user(request.user), **ser.validated_data)
        return Response(ServiceOrderSerializer(order).data, status=status.HTTP_201_CREATED)


class AvailableOrdersView(APIView):
    permission_classes = [role_required(Role.OPERATOR, Role.ADMIN, Role.SUPER_ADMIN)]

    def get(self, request):
        orders = available_orders_for(caller_from_user(request.user), limit=_max_limit())
        return Response(ServiceOrderSerializer(orders, many=True).data)


class ServiceOrderDetailView(APIView):
    def get(self, request, pk: int):
        order = get_order_for(caller_from_user(request.user), pk)
        return Response(ServiceOrderSerializer(order).data)


class TakeOrderView(APIView):
    def post(self, request, pk: int):
        ser = NotesSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        order = lifecycle.take_order(caller_from_user(request.user), pk, notes=ser.validated_data["notes"])
        return Response({"message": "Order taken.", "order": ServiceOrderSerializer(order).data})


class ReleaseOrderView(APIView):
    def post(self, request, pk: int):
        ser = NotesSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        order = lifecycle.release_order(caller_from_user(request.user), pk, notes=ser.validated_data["notes"])
        return Response({"message": "Order released.", "order": ServiceOrderSerializer(order).data})


class AssignOperatorView(APIView):
    def post(self, request, pk: int):
        ser = AssignOperatorSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        order = lifecycle.assign_operator(caller_from_user(request.user), pk, ser.validated_data["operator_id"])
        return Response(ServiceOrderSerializer(order).data)


class ServiceOrderStatusView(APIView):
    def patch(self, request, pk: int):
        ser = StatusChangeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        order = lifecycle.change_status(
            caller_from_user(request.user),
            pk,
            ser.validated_data["status"],
            notes=ser.validated_data["notes"],
        )
        return Response(ServiceOrderSerializer(order).data)


class ValidateStatusChangeView(APIView):
    permission_classes = [role_required(Role.OPERATOR, Role.ADMIN, Role.SUPER_ADMIN)]

    def post(self, request, pk: int):
        ser = StatusCheckSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        check = lifecycle.check_status_change(caller_from_user(request.user), pk, ser.validated_data["new_status"])
        return Response(check.as_dict())


class StatusHistoryView(APIView):
    def get(self, request, pk: int):
        # read access to the order is required first
        order = get_order_for(caller_from_user(request.user), pk)
        return Response(StatusHistorySerializer(history_of(order.pk), many=True).data)


class ServiceOrderChecklistView(APIView):
    def get(self, request, pk: int):
        order = get_order_for(caller_from_user(request.user), pk)
        return Response(ChecklistEntrySerializer(checklist_for(order), many=True).data)


class ChecklistValidationView(APIView):
    def get(self, request, pk: int):
        caller = caller_from_user(request.user)
        if not ServiceOrderPolicy.can_check_checklist(caller):
            raise Forbidden("Only admins and operators can validate checklists.")
        order = get_order_for(caller, pk)
        return Response(evaluate_checklist(order).as_dict())


class ChecklistEntryCompleteView(APIView):
    def patch(self, request, pk: int):
        ser = ChecklistCompleteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        entry = complete_checklist_item(caller_from_user(request.user), pk, notes=ser.validated_data["notes"])
        return Response(ChecklistEntrySerializer(entry).data)


class ChecklistItemsByTypeView(APIView):
    def get(self, request, vehicle_type_id: int):
        vt = get_object_or_404(VehicleType, pk=vehicle_type_id)
        items = ChecklistItem.objects.filter(vehicle_type=vt, is_active=True).order_by("order", "id")
        return Response(ChecklistItemSerializer(items, many=True).data)
