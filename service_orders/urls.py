from django.urls import path

from .api.views import (
    AssignOperatorView,
    AvailableOrdersView,
    ChecklistEntryCompleteView,
    ChecklistItemsByTypeView,
    ChecklistValidationView,
    ReleaseOrderView,
    ServiceOrderChecklistView,
    ServiceOrderDetailView,
    ServiceOrderListCreateView,
    ServiceOrderStatusView,
    StatusHistoryView,
    TakeOrderView,
    ValidateStatusChangeView,
)

app_name = "service_orders"

urlpatterns = [
    path("service-orders/", ServiceOrderListCreateView.as_view(), name="order_list"),
    path("service-orders/available/", AvailableOrdersView.as_view(), name="order_available"),
    path("service-orders/<int:pk>/", ServiceOrderDetailView.as_view(), name="order_detail"),

    # lifecycle
    path("service-orders/<int:pk>/take/", TakeOrderView.as_view(), name="order_take"),
    path("service-orders/<int:pk>/release/", ReleaseOrderView.as_view(), name="order_release"),
    path("service-orders/<int:pk>/assign/", AssignOperatorView.as_view(), name="order_assign"),
    path("service-orders/<int:pk>/status/", ServiceOrderStatusView.as_view(), name="order_status"),
    path("service-orders/<int:pk>/validate-status-change/", ValidateStatusChangeView.as_view(), name="order_validate_status"),
    path("service-orders/<int:pk>/status-history/", StatusHistoryView.as_view(), name="order_history"),

    # checklist
    path("service-orders/<int:pk>/checklist/", ServiceOrderChecklistView.as_view(), name="order_checklist"),
    path("service-orders/<int:pk>/checklist-validation/", ChecklistValidationView.as_view(), name="order_checklist_validation"),
    path("checklist/<int:pk>/complete/", ChecklistEntryCompleteView.as_view(), name="checklist_complete"),
    path("checklist-items/<int:vehicle_type_id>/", ChecklistItemsByTypeView.as_view(), name="checklist_items"),
]
