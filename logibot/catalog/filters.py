import django_filters
from django.db.models import Q, F
from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Filter for Product model using django-filter"""

    # Searches code, name and description
    search = django_filters.CharFilter(method='filter_search', label='Search')

    category = django_filters.NumberFilter(field_name='category_id', lookup_expr='exact')
    category_code = django_filters.CharFilter(field_name='category__code', lookup_expr='iexact')
    b2b_enabled = django_filters.BooleanFilter(field_name='b2b_enabled')
    active = django_filters.BooleanFilter(field_name='is_active')
    low_stock = django_filters.CharFilter(method='filter_low_stock', label='Low Stock')
    out_of_stock = django_filters.CharFilter(method='filter_out_of_stock', label='Out of Stock')

    class Meta:
        model = Product
        fields = ['search', 'category', 'category_code', 'b2b_enabled', 'active', 'low_stock', 'out_of_stock']

    def filter_search(self, queryset, name, value):
        """Match every word of the search text against code, name or description"""
        search = (value or '').strip()
        if not search:
            return queryset
        for word in search.split():
            queryset = queryset.filter(
                Q(code__icontains=word) |
                Q(name__icontains=word) |
                Q(description__icontains=word)
            )
        return queryset

    def filter_low_stock(self, queryset, name, value):
        """Filter products below their safety stock"""
        if value is None or value == '':
            return queryset
        if value.lower() == 'true':
            return queryset.filter(stock__lt=F('safety_stock'))
        return queryset.filter(stock__gte=F('safety_stock'))

    def filter_out_of_stock(self, queryset, name, value):
        if value is None or value == '':
            return queryset
        if value.lower() == 'true':
            return queryset.filter(stock__lte=0)
        return queryset.filter(stock__gt=0)
