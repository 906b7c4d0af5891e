"""
Tests for production record creation and listing.
"""

import datetime

import pytest
from django.core.exceptions import PermissionDenied
from django.db import IntegrityError, transaction

from quality.exceptions import NotFoundError, ValidationError
from quality.models import ProductionRecord
from quality.services import ProductionRecordService


def _create(user, product, **overrides):
    data = {
        'product_id': product.id,
        'lot_number': 'L-2025-001',
        'production_date': '2025-01-15',
        'shift': ProductionRecord.MORNING,
        'total_produced': 1000,
        'total_approved': 950,
        'total_rejected': 50,
    }
    data.update(overrides)
    return ProductionRecordService.create_production_record(user, **data)


@pytest.mark.django_db
class TestCreateProductionRecord:

    def test_create_record(self, assistant, product):
        record = _create(assistant, product, production_line=' Línea 2 ')

        assert record.pk is not None
        assert record.product == product
        assert record.operator == assistant
        assert record.production_date == datetime.date(2025, 1, 15)
        assert record.production_line == 'Línea 2'
        assert not record.has_quality_control

    def test_counts_may_leave_units_unclassified(self, assistant, product):
        record = _create(assistant, product, total_approved=10, total_rejected=5)
        assert record.total_approved + record.total_rejected < record.total_produced

    def test_sum_exceeding_total_is_rejected(self, assistant, product):
        with pytest.raises(ValidationError) as exc:
            _create(assistant, product, total_approved=900, total_rejected=200)
        assert "excede el total producido" in exc.value.message
        assert ProductionRecord.objects.count() == 0

    @pytest.mark.parametrize('field, value', [
        ('total_produced', 0),
        ('total_produced', -5),
        ('total_approved', -1),
        ('total_rejected', 'diez'),
        ('lot_number', '   '),
        ('shift', 'madrugada'),
        ('production_date', '15/01/2025'),
        ('production_date', None),
    ])
    def test_invalid_input(self, assistant, product, field, value):
        with pytest.raises(ValidationError):
            _create(assistant, product, **{field: value})

    def test_unknown_product(self, assistant, product):
        with pytest.raises(NotFoundError):
            _create(assistant, product, product_id=product.id + 100)

    @pytest.mark.parametrize('role_fixture', ['visitor', 'management'])
    def test_read_only_roles_cannot_create(self, request, product, role_fixture):
        user = request.getfixturevalue(role_fixture)
        with pytest.raises(PermissionDenied):
            _create(user, product)

    def test_storage_rejects_inconsistent_counts(self, assistant, product):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                ProductionRecord.objects.create(
                    product=product,
                    operator=assistant,
                    lot_number='L-X',
                    production_date=datetime.date(2025, 1, 15),
                    shift=ProductionRecord.NIGHT,
                    total_produced=10,
                    total_approved=8,
                    total_rejected=3,
                )


@pytest.mark.django_db
class TestListProductionRecords:

    def test_filters(self, make_record, product, strict_product):
        old = make_record(product, lot_number='ABC-1', production_date=datetime.date(2025, 1, 1))
        new = make_record(product, lot_number='abc-2', production_date=datetime.date(2025, 2, 1),
                          shift=ProductionRecord.NIGHT)
        other = make_record(strict_product, lot_number='XYZ-1', production_date=datetime.date(2025, 3, 1))

        page = ProductionRecordService.list_production_records({'product_id': str(product.id)})
        assert list(page.object_list) == [new, old]

        page = ProductionRecordService.list_production_records({'lot_number': 'abc'})
        assert {r.pk for r in page.object_list} == {old.pk, new.pk}

        page = ProductionRecordService.list_production_records({
            'start_date': '2025-01-15', 'end_date': '2025-03-01'
        })
        assert list(page.object_list) == [other, new]

        page = ProductionRecordService.list_production_records({'shift': 'night'})
        assert list(page.object_list) == [new]

    def test_has_quality_control_filter(self, make_record, product, assistant):
        from quality.models import QualityControl

        inspected = make_record(product)
        pending = make_record(product)
        QualityControl.objects.create(production_record=inspected, inspector=assistant)

        page = ProductionRecordService.list_production_records({'has_quality_control': 'true'})
        assert list(page.object_list) == [inspected]

        page = ProductionRecordService.list_production_records({'has_quality_control': 'false'})
        assert list(page.object_list) == [pending]

    def test_pagination(self, make_record, product):
        for _ in range(5):
            make_record(product)

        page = ProductionRecordService.list_production_records({}, page=2, limit=2)
        assert page.paginator.count == 5
        assert page.paginator.num_pages == 3
        assert len(page.object_list) == 2

        page = ProductionRecordService.list_production_records({}, page=10, limit=2)
        assert list(page.object_list) == []
        assert page.number == 10

    @pytest.mark.parametrize('filters', [
        {'start_date': 'ayer'},
        {'product_id': 'abc'},
        {'shift': 'madrugada'},
        {'has_quality_control': 'tal vez'},
    ])
    def test_malformed_filters(self, filters):
        with pytest.raises(ValidationError):
            ProductionRecordService.list_production_records(filters)

    @pytest.mark.parametrize('page, limit', [(0, 10), ('x', 10), (1, -3)])
    def test_malformed_pagination(self, page, limit):
        with pytest.raises(ValidationError):
            ProductionRecordService.list_production_records({}, page=page, limit=limit)

    def test_get_missing_record(self):
        with pytest.raises(NotFoundError):
            ProductionRecordService.get_production_record(12345)
