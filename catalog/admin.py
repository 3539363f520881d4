"""
Django Admin configuration for catalog models.
"""
from django.contrib import admin
from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'price', 'category', 'quantity', 'is_out_of_stock']
    list_filter = ['category']
    search_fields = ['id', 'name']
    ordering = ['id']

    def is_out_of_stock(self, obj):
        return obj.is_out_of_stock
    is_out_of_stock.boolean = True
    is_out_of_stock.short_description = 'Out of Stock'
