import django_filters
from django.db.models import Q

from modules.inventory.models import InventoryRecord
from modules.inventory.repositories.django_repository import LOW_STOCK_Q


class InventoryFilter(django_filters.FilterSet):
    """Typed filters for ledger listings.

    Expects a queryset already annotated by ``with_stock_totals``.
    """

    branch_code = django_filters.CharFilter(field_name="branch_id")
    part_no = django_filters.CharFilter(field_name="part_number")
    rack = django_filters.CharFilter(field_name="rack_location", lookup_expr="icontains")
    search = django_filters.CharFilter(method="filter_search")
    low_stock_only = django_filters.BooleanFilter(method="filter_low_stock")

    class Meta:
        model = InventoryRecord
        fields = ["branch_code", "part_no", "rack", "search", "low_stock_only"]

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(part_number__icontains=value)
            | Q(part_name__icontains=value)
            | Q(rack_location__icontains=value)
        )

    def filter_low_stock(self, queryset, name, value):
        if value:
            return queryset.filter(LOW_STOCK_Q)
        return queryset
