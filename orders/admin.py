"""
Django Admin configuration for order models.
"""
from django.contrib import admin
from .models import Order, OrderProduct


class OrderProductInline(admin.TabularInline):
    model = OrderProduct
    extra = 0
    readonly_fields = ['product']
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'status', 'value', 'prod_quantity', 'dispatch_date']
    list_filter = ['status', 'dispatch_date']
    search_fields = ['id']
    ordering = ['-id']
    readonly_fields = ['id', 'value', 'prod_quantity', 'dispatch_date']
    inlines = [OrderProductInline]


@admin.register(OrderProduct)
class OrderProductAdmin(admin.ModelAdmin):
    list_display = ['id', 'order', 'product']
    list_filter = ['order__status']
    search_fields = ['product__name', 'order__id']
    ordering = ['-id']
    raw_id_fields = ['order', 'product']
