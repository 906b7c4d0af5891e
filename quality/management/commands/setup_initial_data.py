from decimal import Decimal

from django.contrib.auth.models import User
from django.core.management.base import BaseCommand

from operators.models import UserProfile
from products.models import Product
from products.services import next_available_product_code


class Command(BaseCommand):
    help = 'Setup initial catalog and users for the quality system'

    def add_arguments(self, parser):
        parser.add_argument(
            '--password',
            default='calidad123',
            help='Password for the demo users that do not exist yet'
        )

    def handle(self, *args, **options):
        products_data = [
            {
                'name': 'Botella PET 500ml',
                'category': 'BOTELLAS',
                'material': 'PET',
                'description': 'Botella transparente para agua de mesa',
                'alert_threshold': Decimal('5.00'),
            },
            {
                'name': 'Bidón Polietileno 20L',
                'category': 'BIDONES',
                'material': 'POLIETILENO',
                'description': 'Bidón de uso industrial',
                'alert_threshold': Decimal('3.00'),
            },
            {
                'name': 'Tapa Rosca 28mm',
                'category': 'TAPAS Y ASAS',
                'material': 'POLIPROPILENO',
                'description': 'Tapa rosca para botellas estándar',
                'alert_threshold': None,
            },
            {
                'name': 'Frasco Policarbonato 250ml',
                'category': 'FRASCOS',
                'material': 'POLICARBONATO',
                'description': 'Frasco de laboratorio reutilizable',
                'alert_threshold': Decimal('2.50'),
            },
        ]

        for product_data in products_data:
            if Product.objects.filter(name=product_data['name']).exists():
                continue
            product = Product.objects.create(
                code=next_available_product_code(product_data['category'], product_data['material']),
                **product_data
            )
            self.stdout.write(self.style.SUCCESS(f'Created product: {product.code} {product.name}'))

        users_data = [
            ('admin', 'Administrador', 'Sistema', UserProfile.ADMIN, 'Calidad'),
            ('supervisor', 'Supervisor', 'Calidad', UserProfile.SUPERVISOR, 'Calidad'),
            ('asistente', 'Asistente', 'Calidad', UserProfile.ASSISTANT, 'Calidad'),
            ('gerencia', 'Gerente', 'Planta', UserProfile.MANAGEMENT, 'Gerencia'),
            ('visitante', 'Visitante', 'Auditoría', UserProfile.VISITOR, 'Auditoría'),
        ]

        for username, first_name, last_name, role, department in users_data:
            if User.objects.filter(username=username).exists():
                continue

            create = User.objects.create_superuser if role == UserProfile.ADMIN else User.objects.create_user
            user = create(
                username=username,
                email=f'{username}@calidad.local',
                password=options['password'],
                first_name=first_name,
                last_name=last_name,
            )
            UserProfile.objects.update_or_create(
                user=user,
                defaults={'role': role, 'department': department}
            )
            self.stdout.write(self.style.SUCCESS(f'Created user: {username} ({role})'))

        self.stdout.write(self.style.SUCCESS('Initial data setup completed successfully!'))
