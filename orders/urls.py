"""
URL routing for order API endpoints.
"""
from django.urls import path
from . import views

app_name = 'orders'

urlpatterns = [
    path('orders', views.OrderCreateView.as_view(), name='order-create'),
    path('orders/<str:order_id>', views.OrderDetailView.as_view(), name='order-detail'),
]
