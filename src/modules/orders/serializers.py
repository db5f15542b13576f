"""Order DRF serializers for API output.

Request payloads are validated by the Pydantic DTOs in ``dtos.py``;
these serializers only render orders and their children.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.users.serializers import UserSummarySerializer


class OrderItemSerializer(serializers.ModelSerializer):
    """Read serializer for order items with their product snapshot."""

    class Meta:
        model = OrderItem
        fields = [
            "product_id",
            "name",
            "quantity",
            "price_at_order",
            "subtotal",
        ]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    """Read serializer for order status history records."""

    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with user, items and history."""

    user = UserSummarySerializer(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_id",
            "user",
            "status",
            "return_reason",
            "total_amount",
            "items",
            "status_history",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Serializer for order lists (no status history)."""

    user = UserSummarySerializer(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_id",
            "user",
            "status",
            "return_reason",
            "total_amount",
            "items",
            "created_at",
        ]
        read_only_fields = fields
