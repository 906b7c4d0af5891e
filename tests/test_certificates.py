"""
Tests for the certificate lifecycle and its PDF document.
"""

import re
from unittest import mock

import pytest
from django.core import mail
from django.core.exceptions import PermissionDenied
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.db import IntegrityError

from certificates.models import Certificate
from certificates.services import CertificateService, build_certificate_facts
from quality.codes import create_with_unique_code, generate_code
from quality.documents import CertificateRenderer
from quality.exceptions import (
    ConflictError, DocumentRenderError, NotFoundError, ValidationError
)
from quality.services import QualityControlService


@pytest.fixture
def inspected_record(record, assistant):
    QualityControlService.submit_quality_control(
        record.id, assistant,
        measurements={'weight': '12.5', 'other_measurements': {'espesor': '0.3', 'color': 'azul'}},
        defects=[
            {'defect_type': 'rebaba', 'quantity': 10, 'description': 'borde'},
            {'defect_type': 'mancha', 'quantity': 5},
        ],
    )
    record.refresh_from_db()
    return record


@pytest.fixture
def pending_certificate(inspected_record, assistant):
    return CertificateService.create_certificate(
        assistant, inspected_record.product_id, inspected_record.id
    )


class TestCodes:

    def test_code_format(self):
        assert re.fullmatch(r'CERT-\d{14}-[0-9A-F]{6}', generate_code('CERT'))
        assert re.fullmatch(r'NC-\d{14}-[0-9A-F]{6}', generate_code('NC'))

    @pytest.mark.django_db
    def test_collision_is_retried(self, pending_certificate, assistant):
        codes = iter([pending_certificate.code, 'CERT-20250115000000-ABCDEF'])

        with mock.patch('quality.codes.generate_code', side_effect=lambda prefix: next(codes)):
            certificate = create_with_unique_code(
                Certificate, 'CERT',
                product=pending_certificate.product,
                production_record=pending_certificate.production_record,
                requested_by=assistant,
            )

        assert certificate.code == 'CERT-20250115000000-ABCDEF'

    @pytest.mark.django_db
    def test_collision_exhausts_attempts(self, settings, pending_certificate, assistant):
        settings.QUALITY_CODE_MAX_ATTEMPTS = 3

        with mock.patch('quality.codes.generate_code', return_value=pending_certificate.code):
            with pytest.raises(ConflictError):
                create_with_unique_code(
                    Certificate, 'CERT',
                    product=pending_certificate.product,
                    production_record=pending_certificate.production_record,
                    requested_by=assistant,
                )

        assert Certificate.objects.count() == 1

    @pytest.mark.django_db
    def test_other_integrity_errors_propagate(self, pending_certificate):
        # requested_by is required: not a code collision
        with pytest.raises(IntegrityError):
            create_with_unique_code(
                Certificate, 'CERT',
                product=pending_certificate.product,
                production_record=pending_certificate.production_record,
                requested_by_id=None,
            )


@pytest.mark.django_db
class TestCreateCertificate:

    def test_create(self, pending_certificate, inspected_record, assistant):
        assert pending_certificate.status == Certificate.PENDING
        assert pending_certificate.product == inspected_record.product
        assert pending_certificate.requested_by == assistant
        assert pending_certificate.pdf_path == ''
        assert re.fullmatch(r'CERT-\d{14}-[0-9A-F]{6}', pending_certificate.code)

    def test_explicit_quality_control(self, inspected_record, assistant):
        certificate = CertificateService.create_certificate(
            assistant, inspected_record.product_id, inspected_record.id,
            quality_control_id=inspected_record.quality_control.id,
        )
        assert certificate.quality_control == inspected_record.quality_control

    def test_lot_without_inspection(self, record, assistant):
        with pytest.raises(ValidationError) as exc:
            CertificateService.create_certificate(assistant, record.product_id, record.id)
        assert "no tiene control de calidad" in exc.value.message

    def test_inspection_from_another_lot(self, inspected_record, make_record, product, assistant):
        other = make_record(product)
        other_control = QualityControlService.submit_quality_control(other.id, assistant)

        with pytest.raises(ValidationError):
            CertificateService.create_certificate(
                assistant, product.id, inspected_record.id, quality_control_id=other_control.id
            )

    def test_missing_inspection_reference(self, inspected_record, assistant):
        with pytest.raises(ValidationError):
            CertificateService.create_certificate(
                assistant, inspected_record.product_id, inspected_record.id, quality_control_id=9999
            )

    def test_product_mismatch(self, inspected_record, strict_product, assistant):
        with pytest.raises(ValidationError) as exc:
            CertificateService.create_certificate(assistant, strict_product.id, inspected_record.id)
        assert "no corresponde" in exc.value.message

    def test_unknown_record(self, product, assistant):
        with pytest.raises(NotFoundError):
            CertificateService.create_certificate(assistant, product.id, 9999)

    def test_visitor_cannot_request(self, inspected_record, visitor):
        with pytest.raises(PermissionDenied):
            CertificateService.create_certificate(visitor, inspected_record.product_id, inspected_record.id)


@pytest.mark.django_db
class TestApproveCertificate:

    def test_approve(self, pending_certificate, supervisor, fake_renderer, fake_notifier):
        certificate = CertificateService.approve(
            pending_certificate.id, supervisor, renderer=fake_renderer, notifier=fake_notifier
        )

        assert certificate.status == Certificate.APPROVED
        assert certificate.approved_by == supervisor
        assert certificate.approved_at is not None
        assert certificate.pdf_path == f"certificates/{certificate.code}.pdf"
        assert len(fake_renderer.rendered) == 1

    def test_facts_bundle(self, pending_certificate, supervisor, fake_renderer):
        CertificateService.approve(pending_certificate.id, supervisor, renderer=fake_renderer)
        facts = fake_renderer.rendered[0]

        assert facts['certificate']['code'] == pending_certificate.code
        assert facts['product']['name'] == 'Botella PET 500ml'
        assert facts['production_record']['total_produced'] == 1000
        assert facts['quality_control']['waste_percentage'] == '1.50'
        assert facts['quality_control']['weight'] == '12.500'
        assert facts['quality_control']['other_measurements'] == [('color', 'azul'), ('espesor', '0.3')]
        assert [d['defect_type'] for d in facts['defects']] == ['Rebaba', 'Mancha']

    def test_facts_are_deterministic(self, pending_certificate, supervisor):
        certificate = CertificateService.get_certificate(pending_certificate.id)
        approved_at = certificate.created_at
        assert build_certificate_facts(certificate, supervisor, approved_at) == \
            build_certificate_facts(certificate, supervisor, approved_at)

    def test_render_failure_keeps_pending(self, pending_certificate, supervisor, failing_renderer, fake_notifier):
        with pytest.raises(DocumentRenderError):
            CertificateService.approve(
                pending_certificate.id, supervisor, renderer=failing_renderer, notifier=fake_notifier
            )

        assert fake_notifier.certificate_emails == []

        pending_certificate.refresh_from_db()
        assert pending_certificate.status == Certificate.PENDING
        assert pending_certificate.pdf_path == ''
        assert pending_certificate.approved_by is None

    @pytest.mark.parametrize('decide', [
        lambda cid, user, renderer: CertificateService.approve(cid, user, renderer=renderer),
        lambda cid, user, renderer: CertificateService.reject(cid, user, 'otra razón'),
    ])
    def test_second_decision_conflicts(self, pending_certificate, supervisor, fake_renderer, decide):
        CertificateService.approve(pending_certificate.id, supervisor, renderer=fake_renderer)

        with pytest.raises(ConflictError):
            decide(pending_certificate.id, supervisor, fake_renderer)

        pending_certificate.refresh_from_db()
        assert pending_certificate.status == Certificate.APPROVED

    def test_lost_race_discards_document(self, pending_certificate, supervisor, fake_renderer):
        """Another supervisor decided between the status check and the update."""
        def reject_meanwhile(facts):
            Certificate.objects.filter(pk=pending_certificate.pk).update(status=Certificate.REJECTED)
            return f"certificates/{facts['certificate']['code']}.pdf"

        fake_renderer.render = reject_meanwhile

        with pytest.raises(ConflictError):
            CertificateService.approve(pending_certificate.id, supervisor, renderer=fake_renderer)

        assert fake_renderer.discarded == [f"certificates/{pending_certificate.code}.pdf"]
        pending_certificate.refresh_from_db()
        assert pending_certificate.status == Certificate.REJECTED

    def test_missing_certificate(self, supervisor, fake_renderer):
        with pytest.raises(NotFoundError):
            CertificateService.approve(9999, supervisor, renderer=fake_renderer)

    @pytest.mark.parametrize('role_fixture', ['assistant', 'visitor', 'management'])
    def test_only_supervisors_approve(self, request, pending_certificate, fake_renderer, role_fixture):
        user = request.getfixturevalue(role_fixture)
        with pytest.raises(PermissionDenied):
            CertificateService.approve(pending_certificate.id, user, renderer=fake_renderer)
        assert fake_renderer.rendered == []

    def test_requester_is_notified_after_commit(
        self, settings, pending_certificate, supervisor, fake_renderer,
        django_capture_on_commit_callbacks
    ):
        settings.QUALITY_MAIL_ENABLED = True

        with django_capture_on_commit_callbacks(execute=True):
            CertificateService.approve(pending_certificate.id, supervisor, renderer=fake_renderer)

        assert [message.to for message in mail.outbox] == [['asistente@calidad.test']]
        assert pending_certificate.code in mail.outbox[0].subject
        pending_certificate.refresh_from_db()
        assert pending_certificate.email_sent is True

    def test_disabled_mail_keeps_flag_unset(
        self, pending_certificate, supervisor, fake_renderer, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            certificate = CertificateService.approve(pending_certificate.id, supervisor, renderer=fake_renderer)

        assert len(mail.outbox) == 0
        certificate.refresh_from_db()
        assert certificate.status == Certificate.APPROVED
        assert certificate.email_sent is False


@pytest.mark.django_db
class TestRejectCertificate:

    def test_reject(self, pending_certificate, supervisor):
        certificate = CertificateService.reject(pending_certificate.id, supervisor, ' Merma fuera de rango ')

        assert certificate.status == Certificate.REJECTED
        assert certificate.rejection_reason == 'Merma fuera de rango'
        assert certificate.approved_by == supervisor
        assert certificate.pdf_path == ''

    def test_reason_required(self, pending_certificate, supervisor):
        with pytest.raises(ValidationError):
            CertificateService.reject(pending_certificate.id, supervisor, '')

    def test_missing_certificate(self, supervisor):
        with pytest.raises(NotFoundError):
            CertificateService.reject(9999, supervisor, 'motivo')

    def test_rejected_cannot_be_approved(self, pending_certificate, supervisor, fake_renderer):
        CertificateService.reject(pending_certificate.id, supervisor, 'motivo')

        with pytest.raises(ConflictError):
            CertificateService.approve(pending_certificate.id, supervisor, renderer=fake_renderer)
        assert fake_renderer.rendered == []


@pytest.mark.django_db
class TestCertificateDocument:

    def test_real_pdf_is_stored_and_downloadable(self, pending_certificate, supervisor):
        certificate = CertificateService.approve(pending_certificate.id, supervisor)

        assert default_storage.exists(certificate.pdf_path)
        found, pdf_file = CertificateService.get_document(certificate.id)
        with pdf_file:
            assert pdf_file.read(5) == b'%PDF-'
        assert found == certificate

    def test_pending_certificate_has_no_document(self, pending_certificate):
        with pytest.raises(ValidationError):
            CertificateService.get_document(pending_certificate.id)

    def test_rejected_certificate_has_no_document(self, pending_certificate, supervisor):
        CertificateService.reject(pending_certificate.id, supervisor, 'motivo')
        with pytest.raises(ValidationError):
            CertificateService.get_document(pending_certificate.id)

    def test_missing_file(self, pending_certificate, supervisor, fake_renderer):
        CertificateService.approve(pending_certificate.id, supervisor, renderer=fake_renderer)
        with pytest.raises(NotFoundError):
            CertificateService.get_document(pending_certificate.id)

    def test_missing_reference(self, pending_certificate):
        Certificate.objects.filter(pk=pending_certificate.pk).update(status=Certificate.APPROVED)
        with pytest.raises(NotFoundError):
            CertificateService.get_document(pending_certificate.id)

    def test_missing_certificate(self):
        with pytest.raises(NotFoundError):
            CertificateService.get_document(9999)

    def test_renderer_wraps_storage_errors(self, pending_certificate, supervisor):
        storage = mock.Mock()
        storage.save.side_effect = OSError("sin espacio")
        facts = build_certificate_facts(pending_certificate, supervisor, pending_certificate.created_at)

        with pytest.raises(DocumentRenderError):
            CertificateRenderer(storage=storage).render(facts)

    def test_renderer_discard(self, pending_certificate):
        name = default_storage.save('certificates/borrar.pdf', ContentFile(b'%PDF-'))
        renderer = CertificateRenderer()
        renderer.discard(name)
        renderer.discard(name)
        assert not default_storage.exists(name)


@pytest.mark.django_db
class TestListCertificates:

    def test_filters(self, pending_certificate, inspected_record, supervisor, assistant):
        second = CertificateService.create_certificate(
            assistant, inspected_record.product_id, inspected_record.id
        )
        CertificateService.reject(second.id, supervisor, 'duplicado')

        page = CertificateService.list_certificates({'status': 'pendiente'})
        assert list(page.object_list) == [pending_certificate]

        page = CertificateService.list_certificates({'production_record_id': inspected_record.id})
        assert list(page.object_list) == [second, pending_certificate]

        with pytest.raises(ValidationError):
            CertificateService.list_certificates({'status': 'anulado'})
