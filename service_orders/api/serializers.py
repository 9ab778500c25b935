from rest_framework import serializers

from ..models import ChecklistItem, ServiceOrder, ServiceOrderChecklist, StatusHistory


class UserBriefSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    username = serializers.CharField()
    full_name = serializers.SerializerMethodField()

    def get_full_name(self, obj):
        return obj.get_full_name() or obj.username


class ServiceOrderSerializer(serializers.ModelSerializer):
    client_id = serializers.IntegerField(read_only=True)
    vehicle_id = serializers.IntegerField(read_only=True)
    operator_id = serializers.IntegerField(read_only=True, allow_null=True)
    taken_by_id = serializers.IntegerField(read_only=True, allow_null=True)
    vehicle_plate = serializers.SerializerMethodField()

    class Meta:
        model = ServiceOrder
        fields = [
            "id", "order_number",
            "client_id", "vehicle_id", "vehicle_plate",
            "operator_id", "taken_by_id", "taken_at",
            "description", "status", "priority",
            "estimated_cost", "final_cost",
            "start_date", "completion_date",
            "created_at", "updated_at",
        ]
        read_only_fields = fields

    def get_vehicle_plate(self, obj):
        return obj.vehicle.plate if obj.vehicle_id else None


class ServiceOrderCreateSerializer(serializers.Serializer):
    # required-ness of description/client is decided by the lifecycle engine
    client_id = serializers.IntegerField(required=False, allow_null=True)
    vehicle_id = serializers.IntegerField()
    description = serializers.CharField(required=False, allow_blank=True, default="")
    priority = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    estimated_cost = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)


class OrderListQuerySerializer(serializers.Serializer):
    status = serializers.CharField(required=False, allow_blank=True)
    limit = serializers.IntegerField(required=False, min_value=1)


class NotesSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class AssignOperatorSerializer(serializers.Serializer):
    operator_id = serializers.IntegerField()


class StatusChangeSerializer(serializers.Serializer):
    status = serializers.CharField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class StatusCheckSerializer(serializers.Serializer):
    new_status = serializers.CharField()


class StatusHistorySerializer(serializers.ModelSerializer):
    changed_by = UserBriefSerializer(read_only=True)

    class Meta:
        model = StatusHistory
        fields = ["id", "previous_status", "new_status", "changed_by", "changed_at", "notes", "operator_action"]
        read_only_fields = fields


class ChecklistItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = ChecklistItem
        fields = ["id", "vehicle_type", "name", "description", "category", "is_required", "order"]
        read_only_fields = fields


class ChecklistEntrySerializer(serializers.ModelSerializer):
    checklist_item = ChecklistItemSerializer(read_only=True)
    completed_by_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = ServiceOrderChecklist
        fields = ["id", "checklist_item", "is_completed", "completed_by_id", "completed_at", "notes"]
        read_only_fields = fields


class ChecklistCompleteSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
