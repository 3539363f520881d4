"""
URL routing for catalog API endpoints.
"""
from django.urls import path
from . import views

app_name = 'catalog'

urlpatterns = [
    path('products', views.ProductCatalogView.as_view(), name='product-catalog'),
]
