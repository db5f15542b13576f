import django_filters
from django.db.models import Q

from modules.orders.constants import OrderStatus
from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(field_name="status", choices=OrderStatus.choices)
    user_id = django_filters.UUIDFilter(field_name="user_id")
    start_date = django_filters.DateFilter(
        field_name="created_at", lookup_expr="date__gte"
    )
    end_date = django_filters.DateFilter(
        field_name="created_at", lookup_expr="date__lte"
    )
    min_amount = django_filters.NumberFilter(
        field_name="total_amount", lookup_expr="gte"
    )
    max_amount = django_filters.NumberFilter(
        field_name="total_amount", lookup_expr="lte"
    )
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Order
        fields = [
            "status",
            "user_id",
            "start_date",
            "end_date",
            "min_amount",
            "max_amount",
            "search",
        ]

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(order_id__icontains=value)
            | Q(user__id__icontains=value)
            | Q(items__name__icontains=value)
        ).distinct()
