import django_filters

from modules.orders.constants import OrderStatus
from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(field_name="status", choices=OrderStatus.choices)
    urgent = django_filters.BooleanFilter(field_name="is_urgent")
    retailer = django_filters.UUIDFilter(field_name="retailer_id")
    branch = django_filters.CharFilter(field_name="branch_id")
    start_date = django_filters.DateFilter(field_name="placed_at", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="placed_at", lookup_expr="date__lte")

    class Meta:
        model = Order
        fields = [
            "status",
            "urgent",
            "retailer",
            "branch",
            "start_date",
            "end_date",
        ]
