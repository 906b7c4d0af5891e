from django.urls import path
from . import api_views

urlpatterns = [
    path('production-records/', api_views.production_records_api, name='production_records_api'),
    path('production-records/<int:record_id>/', api_views.production_record_detail_api, name='production_record_detail_api'),

    path('quality-controls/', api_views.quality_controls_api, name='quality_controls_api'),
    path('quality-controls/<int:control_id>/', api_views.quality_control_detail_api, name='quality_control_detail_api'),

    path('alerts/', api_views.alerts_api, name='alerts_api'),
    path('alerts/<int:alert_id>/', api_views.alert_detail_api, name='alert_detail_api'),
    path('alerts/<int:alert_id>/resolve/', api_views.resolve_alert_api, name='resolve_alert_api'),
    path('alerts/<int:alert_id>/dismiss/', api_views.dismiss_alert_api, name='dismiss_alert_api'),

    path('certificates/', api_views.certificates_api, name='certificates_api'),
    path('certificates/<int:certificate_id>/', api_views.certificate_detail_api, name='certificate_detail_api'),
    path('certificates/<int:certificate_id>/approve/', api_views.approve_certificate_api, name='approve_certificate_api'),
    path('certificates/<int:certificate_id>/reject/', api_views.reject_certificate_api, name='reject_certificate_api'),
    path('certificates/<int:certificate_id>/download/', api_views.download_certificate_api, name='download_certificate_api'),

    path('non-conformities/', api_views.non_conformities_api, name='non_conformities_api'),
    path('non-conformities/<int:non_conformity_id>/', api_views.non_conformity_detail_api, name='non_conformity_detail_api'),
    path('non-conformities/<int:non_conformity_id>/resolve/', api_views.resolve_non_conformity_api, name='resolve_non_conformity_api'),
    path('non-conformities/<int:non_conformity_id>/status/', api_views.update_non_conformity_status_api, name='update_non_conformity_status_api'),
]
