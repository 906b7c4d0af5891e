import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('quality', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Defect',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('defect_type', models.CharField(choices=[('mancha', 'Mancha'), ('rebaba', 'Rebaba'), ('incompleto', 'Incompleto'), ('deformacion', 'Deformación'), ('rayon', 'Rayón'), ('otro', 'Otro')], max_length=20)),
                ('quantity', models.PositiveIntegerField(default=0)),
                ('description', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('quality_control', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='defects', to='quality.qualitycontrol')),
            ],
            options={
                'verbose_name': 'Defecto',
                'verbose_name_plural': 'Defectos',
                'ordering': ['id'],
                'indexes': [models.Index(fields=['defect_type'], name='defect_type_idx')],
            },
        ),
    ]
