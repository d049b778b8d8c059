# api/urls.py
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from accounts.views import LoginView
from . import views

router = DefaultRouter()
router.register(r'blood-requests', views.BloodRequestViewSet, basename='blood-request')
router.register(r'notifications', views.NotificationViewSet, basename='notification')
router.register(r'donations', views.DonationViewSet, basename='donation')

app_name = 'api'

urlpatterns = [
    path('', include(router.urls)),

    # JWT
    path('token/', LoginView.as_view(), name='token_obtain_pair'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    path('donors/<int:donor_id>/badges/', views.donor_badges, name='donor-badges'),
    path('donors/<int:donor_id>/badges/recompute/', views.recompute_badges, name='donor-badges-recompute'),

    path('hospitals/<int:hospital_id>/recognition/', views.hospital_recognition, name='hospital-recognition'),
    path('hospitals/<int:hospital_id>/donors/', views.hospital_donors, name='hospital-donors'),
    path('hospitals/<int:hospital_id>/opt-in/', views.hospital_opt_in, name='hospital-opt-in'),
]

# GET    /api/blood-requests/                    - Active requests, most urgent first
# POST   /api/blood-requests/                    - Create + notify donors (hospital)
# GET    /api/blood-requests/{id}/               - Request detail
# PATCH  /api/blood-requests/{id}/               - Mark fulfilled/expired (owning hospital)
# GET    /api/blood-requests/{id}/sms-stats/     - SMS delivery counts (owning hospital)
#
# GET    /api/notifications/                     - Own notifications
# GET    /api/notifications/unread-count/        - Unread count
# POST   /api/notifications/{id}/read/           - Mark as read
# DELETE /api/notifications/{id}/                - Delete
#
# POST   /api/donations/                         - Record a donation (hospital)
# POST   /api/donations/{id}/complete/           - Complete it, award badges, invite to opt in
#
# GET    /api/donors/{id}/badges/                - Earned badges and progress
# POST   /api/donors/{id}/badges/recompute/      - Award missing badges
#
# GET    /api/hospitals/{id}/recognition/        - Recognition dashboard
# GET    /api/hospitals/{id}/donors/             - Consented donors (owning hospital)
# GET    /api/hospitals/{id}/opt-in/?token=...   - Donor consent link
