from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import LowStockListView, MaterialViewSet, MovementListView, StockAdjustView

router = SimpleRouter()
router.register(r"materials", MaterialViewSet, basename="material")

urlpatterns = [
    path("products/<int:product_id>/adjust/", StockAdjustView.as_view(), name="stock-adjust"),
    path("movements/", MovementListView.as_view(), name="movement-list"),
    path("low-stock/", LowStockListView.as_view(), name="low-stock-list"),
    path("", include(router.urls)),
]
