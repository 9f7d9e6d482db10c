from django.urls import path, include
from rest_framework.routers import DefaultRouter

from apps.converter.api.v1.views import (
    CurrencyViewSet,
    ProviderViewSet,
    RateViewSet,
    SessionViewSet,
    TrackedCurrencyViewSet,
)

router = DefaultRouter()
router.register(r'currencies', CurrencyViewSet, basename='currency')
router.register(r'tracked', TrackedCurrencyViewSet, basename='tracked-currency')
router.register(r'rates', RateViewSet, basename='rate')
router.register(r'session', SessionViewSet, basename='session')
router.register(r'providers', ProviderViewSet, basename='provider')

urlpatterns = [
    path('', include(router.urls)),
]
