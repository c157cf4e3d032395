"""API URL routing for GigPro."""
from django.urls import path
from rest_framework.routers import DefaultRouter

from .auth_views import CurrentUserView, LoginView, LogoutView, ProfileView, RegisterView
from .views import ClientViewSet, GigViewSet, InvoiceViewSet

router = DefaultRouter(trailing_slash=False)
router.register(r'clients', ClientViewSet, basename='api-clients')
router.register(r'gigs', GigViewSet, basename='api-gigs')
router.register(r'invoices', InvoiceViewSet, basename='api-invoices')

urlpatterns = router.urls + [
    path('auth/register', RegisterView.as_view(), name='auth-register'),
    path('auth/login', LoginView.as_view(), name='auth-login'),
    path('auth/logout', LogoutView.as_view(), name='auth-logout'),
    path('auth/user', CurrentUserView.as_view(), name='auth-user'),
    path('user', ProfileView.as_view(), name='user-profile'),
]
