from channels.generic.websocket import AsyncJsonWebsocketConsumer

from .notifications import NOTIFICATIONS_GROUP

# Event keys consumed by the layer itself or sent explicitly
_ENVELOPE_KEYS = ('type', 'message', 'alert_type', 'priority', 'timestamp')


class NotificationConsumer(AsyncJsonWebsocketConsumer):
    """Pushes waste alerts and certificate decisions to authenticated clients"""

    async def connect(self):
        if self.scope["user"].is_anonymous:
            await self.close()
            return

        await self.channel_layer.group_add(NOTIFICATIONS_GROUP, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(NOTIFICATIONS_GROUP, self.channel_name)

    async def receive_json(self, content, **kwargs):
        # Keep-alive only
        if content.get('type') == 'ping':
            await self.send_json({'type': 'pong', 'timestamp': content.get('timestamp')})

    async def notification_message(self, event):
        await self.send_json({
            'type': 'notification',
            'message': event['message'],
            'alert_type': event.get('alert_type', 'info'),
            'priority': event.get('priority', 'MEDIUM'),
            'timestamp': event.get('timestamp'),
            **{key: value for key, value in event.items() if key not in _ENVELOPE_KEYS},
        })
