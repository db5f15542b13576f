import django_filters
from django.db.models import Q

from modules.users.models import User


class UserFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(method="filter_name")
    phone = django_filters.CharFilter(field_name="phone", lookup_expr="exact")
    email = django_filters.CharFilter(field_name="email", lookup_expr="iexact")

    class Meta:
        model = User
        fields = ["name", "phone", "email"]

    def filter_name(self, queryset, name, value):
        return queryset.filter(
            Q(first_name__icontains=value) | Q(last_name__icontains=value)
        )
