import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('products', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ProductionRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('lot_number', models.CharField(help_text='Número de lote', max_length=100)),
                ('production_date', models.DateField()),
                ('shift', models.CharField(choices=[('morning', 'Mañana'), ('afternoon', 'Tarde'), ('night', 'Noche')], max_length=20)),
                ('production_line', models.CharField(blank=True, max_length=50)),
                ('total_produced', models.PositiveIntegerField()),
                ('total_approved', models.PositiveIntegerField(default=0)),
                ('total_rejected', models.PositiveIntegerField(default=0)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('operator', models.ForeignKey(help_text='Usuario que registró la producción', on_delete=django.db.models.deletion.PROTECT, related_name='production_records', to=settings.AUTH_USER_MODEL)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='production_records', to='products.product')),
            ],
            options={
                'verbose_name': 'Registro de Producción',
                'verbose_name_plural': 'Registros de Producción',
                'ordering': ['-production_date', '-id'],
                'indexes': [
                    models.Index(fields=['production_date'], name='production_record_date_idx'),
                    models.Index(fields=['lot_number'], name='production_record_lot_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('total_produced__gte', 1)), name='production_record_total_produced_gte_1'),
                    models.CheckConstraint(condition=models.Q(('total_approved__lte', models.F('total_produced') - models.F('total_rejected'))), name='production_record_counts_within_total'),
                ],
            },
        ),
        migrations.CreateModel(
            name='QualityControl',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('weight', models.DecimalField(blank=True, decimal_places=3, help_text='Peso en gramos', max_digits=10, null=True)),
                ('diameter', models.DecimalField(blank=True, decimal_places=2, help_text='Diámetro en mm', max_digits=10, null=True)),
                ('height', models.DecimalField(blank=True, decimal_places=2, help_text='Altura en mm', max_digits=10, null=True)),
                ('width', models.DecimalField(blank=True, decimal_places=2, help_text='Ancho en mm', max_digits=10, null=True)),
                ('other_measurements', models.JSONField(blank=True, null=True)),
                ('waste_percentage', models.DecimalField(decimal_places=2, default=0, help_text='Porcentaje de merma calculado', max_digits=7)),
                ('approved', models.BooleanField(default=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('inspector', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='quality_controls', to=settings.AUTH_USER_MODEL)),
                ('production_record', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='quality_control', to='quality.productionrecord')),
            ],
            options={
                'verbose_name': 'Control de Calidad',
                'verbose_name_plural': 'Controles de Calidad',
                'ordering': ['-created_at', '-id'],
            },
        ),
    ]
