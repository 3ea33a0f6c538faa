from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView
from .views import (
    health, register, login, ProfileView,
    GameViewSet, MoveView, GameHistoryView
)

router = DefaultRouter()
router.register('games', GameViewSet, basename='game')

urlpatterns = [
    path('health/', health, name='health'),
    path('auth/register/', register, name='register'),
    path('auth/login/', login, name='login'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token-refresh'),
    path('auth/profile/', ProfileView.as_view(), name='profile'),
    path('games/<int:pk>/move/', MoveView.as_view(), name='make-move'),
    path('history/', GameHistoryView.as_view(), name='game-history'),
    path('', include(router.urls)),
]
