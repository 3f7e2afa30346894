from django.urls import path
from .views import (
    DoctorStatementView, DoctorTestBreakdownView, LabReferralSummaryView,
    DoctorPatientsView, LabReferralPatientsView
)

urlpatterns = [
    path('doctor-statement/', DoctorStatementView.as_view(), name='doctor-statement'),
    path('doctor-breakdown/', DoctorTestBreakdownView.as_view(), name='doctor-breakdown'),
    path('lab-referral-summary/', LabReferralSummaryView.as_view(), name='lab-referral-summary'),
    path('doctor-patients/', DoctorPatientsView.as_view(), name='doctor-patients'),
    path('lab-referral-patients/', LabReferralPatientsView.as_view(), name='lab-referral-patients'),
]
