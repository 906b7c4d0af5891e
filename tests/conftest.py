"""
Pytest configuration and fixtures for the quality system tests.
"""

import datetime
import itertools
from decimal import Decimal

import pytest
from django.contrib.auth.models import User
from rest_framework.test import APIClient

from operators.models import UserProfile
from products.models import Product
from quality.exceptions import DocumentRenderError
from quality.models import ProductionRecord


_counter = itertools.count(1)


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    """Generated certificate PDFs go to a per-test directory."""
    settings.MEDIA_ROOT = str(tmp_path / 'media')
    settings.QUALITY_MAIL_ENABLED = False
    settings.QUALITY_DEFAULT_ALERT_THRESHOLD = Decimal('5.0')
    return settings.MEDIA_ROOT


@pytest.fixture
def make_user(db):
    """Factory for users holding a given role."""
    def _make_user(role=UserProfile.ASSISTANT, username=None, email=None, is_active=True):
        number = next(_counter)
        username = username or f"{role}_{number}"
        user = User.objects.create_user(
            username=username,
            email=f"{username}@calidad.test" if email is None else email,
            password="testpass123",
            first_name=role.capitalize(),
            last_name=str(number),
            is_active=is_active,
        )
        user.userprofile.role = role
        user.userprofile.save()
        return user
    return _make_user


@pytest.fixture
def assistant(make_user):
    return make_user(UserProfile.ASSISTANT, username="asistente")


@pytest.fixture
def supervisor(make_user):
    return make_user(UserProfile.SUPERVISOR, username="supervisor")


@pytest.fixture
def administrator(make_user):
    return make_user(UserProfile.ADMIN, username="administrador")


@pytest.fixture
def visitor(make_user):
    return make_user(UserProfile.VISITOR, username="visitante")


@pytest.fixture
def management(make_user):
    return make_user(UserProfile.MANAGEMENT, username="gerencia")


@pytest.fixture
def product(db):
    """Product without its own threshold: the 5.0% default applies."""
    return Product.objects.create(
        code="PT003002",
        name="Botella PET 500ml",
        category="BOTELLAS",
        material="PET",
    )


@pytest.fixture
def strict_product(db):
    return Product.objects.create(
        code="PT005004",
        name="Bidón Polietileno 20L",
        category="BIDONES",
        material="POLIETILENO",
        alert_threshold=Decimal('2.00'),
    )


@pytest.fixture
def make_record(db, assistant):
    """Factory for production records, bypassing the service layer."""
    def _make_record(product, total_produced=1000, total_approved=0, total_rejected=0, **kwargs):
        defaults = {
            'lot_number': f"L-{next(_counter):04d}",
            'production_date': datetime.date(2025, 1, 15),
            'shift': ProductionRecord.MORNING,
            'operator': assistant,
        }
        defaults.update(kwargs)
        return ProductionRecord.objects.create(
            product=product,
            total_produced=total_produced,
            total_approved=total_approved,
            total_rejected=total_rejected,
            **defaults
        )
    return _make_record


@pytest.fixture
def record(make_record, product):
    return make_record(product, total_produced=1000, total_approved=950, total_rejected=50)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for(api_client):
    """APIClient authenticated as the given user."""
    def _client_for(user):
        api_client.force_authenticate(user=user)
        return api_client
    return _client_for


class FakeRenderer:
    """Stands in for the PDF renderer; records the facts it was given."""

    def __init__(self, fail=False):
        self.fail = fail
        self.rendered = []
        self.discarded = []

    def render(self, facts):
        if self.fail:
            raise DocumentRenderError("fallo de prueba")
        self.rendered.append(facts)
        return f"certificates/{facts['certificate']['code']}.pdf"

    def discard(self, name):
        self.discarded.append(name)


class FakeNotifier:
    """Notification double recording every call."""

    def __init__(self, accept=True):
        self.accept = accept
        self.alert_emails = []
        self.certificate_emails = []
        self.broadcasts = []

    def send_alert_email(self, to, alert_data):
        self.alert_emails.append((to, alert_data))
        return self.accept

    def send_certificate_email(self, to, certificate_data):
        self.certificate_emails.append((to, certificate_data))
        return self.accept

    def broadcast(self, message, alert_type, priority="MEDIUM", **extra):
        self.broadcasts.append({'message': message, 'alert_type': alert_type, **extra})
        return True


@pytest.fixture
def fake_renderer():
    return FakeRenderer()


@pytest.fixture
def fake_notifier():
    return FakeNotifier()


@pytest.fixture
def failing_renderer():
    return FakeRenderer(fail=True)
