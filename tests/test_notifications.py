"""
Tests for e-mail delivery and the websocket notification channel.
"""

from unittest import mock

import pytest
from asgiref.sync import async_to_sync, sync_to_async
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser
from django.core import mail

from quality.consumers import NotificationConsumer
from quality.notifications import NotificationService


class TestSendEmail:

    def test_disabled(self, settings):
        settings.QUALITY_MAIL_ENABLED = False
        assert NotificationService.send_email('a@b.c', 'Asunto', 'Texto') is False
        assert len(mail.outbox) == 0

    def test_sent(self, settings):
        settings.QUALITY_MAIL_ENABLED = True
        settings.DEFAULT_FROM_EMAIL = 'calidad@planta.test'

        assert NotificationService.send_email('a@b.c', 'Asunto', 'Texto') is True
        assert mail.outbox[0].from_email == 'calidad@planta.test'
        assert mail.outbox[0].to == ['a@b.c']

    def test_backend_failure_is_reported_not_raised(self, settings):
        settings.QUALITY_MAIL_ENABLED = True
        with mock.patch('quality.notifications.send_mail', side_effect=OSError("sin red")):
            assert NotificationService.send_email('a@b.c', 'Asunto', 'Texto') is False

    def test_alert_email_content(self, settings):
        settings.QUALITY_MAIL_ENABLED = True
        NotificationService.send_alert_email('sup@planta.test', {
            'product_name': 'Tapa Rosca 28mm',
            'lot_number': 'L-9',
            'waste_percentage': '7.25',
            'threshold': '5.00',
            'date': '15/01/2025 08:00',
        })

        message = mail.outbox[0]
        assert message.subject == 'Alerta de Calidad - Tapa Rosca 28mm'
        assert 'Lote: L-9' in message.body
        assert 'Porcentaje de Merma: 7.25%' in message.body

    def test_broadcast_without_layer(self):
        with mock.patch('quality.notifications.get_channel_layer', return_value=None):
            assert NotificationService.broadcast('hola', 'info') is False

    def test_broadcast_failure_is_swallowed(self):
        layer = mock.Mock()
        layer.group_send = mock.AsyncMock(side_effect=RuntimeError("redis caído"))
        with mock.patch('quality.notifications.get_channel_layer', return_value=layer):
            assert NotificationService.broadcast('hola', 'info') is False


@pytest.mark.django_db
class TestNotificationConsumer:

    def test_broadcast_reaches_connected_clients(self, supervisor):
        async def scenario():
            communicator = WebsocketCommunicator(NotificationConsumer.as_asgi(), '/ws/notifications/')
            communicator.scope['user'] = supervisor
            connected, _ = await communicator.connect()
            assert connected

            sent = await sync_to_async(NotificationService.broadcast)(
                'Merma alta', 'waste_threshold', priority='HIGH', alert_id=7
            )
            assert sent is True

            message = await communicator.receive_json_from()
            await communicator.disconnect()
            return message

        message = async_to_sync(scenario)()

        assert message['type'] == 'notification'
        assert message['message'] == 'Merma alta'
        assert message['alert_type'] == 'waste_threshold'
        assert message['priority'] == 'HIGH'
        assert message['alert_id'] == 7

    def test_ping(self, supervisor):
        async def scenario():
            communicator = WebsocketCommunicator(NotificationConsumer.as_asgi(), '/ws/notifications/')
            communicator.scope['user'] = supervisor
            await communicator.connect()
            await communicator.send_json_to({'type': 'ping', 'timestamp': 123})
            message = await communicator.receive_json_from()
            await communicator.disconnect()
            return message

        assert async_to_sync(scenario)() == {'type': 'pong', 'timestamp': 123}

    def test_anonymous_is_refused(self):
        async def scenario():
            communicator = WebsocketCommunicator(NotificationConsumer.as_asgi(), '/ws/notifications/')
            communicator.scope['user'] = AnonymousUser()
            connected, _ = await communicator.connect()
            return connected

        assert async_to_sync(scenario)() is False
