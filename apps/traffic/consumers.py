"""
Live traffic feed.
Dashboards subscribe at ws/traffic/ and receive every recorded camera
reading and congestion halt as {"type": "traffic.update", ...}.
"""

import logging
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from channels.db import database_sync_to_async

from apps.traffic.service import TRAFFIC_GROUP

logger = logging.getLogger("portlink.traffic")


class TrafficConsumer(AsyncJsonWebsocketConsumer):

    async def connect(self):
        await self.channel_layer.group_add(TRAFFIC_GROUP, self.channel_name)
        await self.accept()
        current = await self._current_status()
        if current:
            await self.send_json({"type": "traffic.update", **current})
        logger.info("Traffic feed connected: %s", self.channel_name)

    async def disconnect(self, code):
        await self.channel_layer.group_discard(TRAFFIC_GROUP, self.channel_name)
        logger.info("Traffic feed disconnected: %s (code=%s)", self.channel_name, code)

    async def receive_json(self, content):
        # Read-only feed; clients may ping to get the current status again
        if content.get("action") == "current":
            current = await self._current_status()
            await self.send_json({"type": "traffic.update", **(current or {})})

    async def traffic_update(self, event):
        await self.send_json(event)

    @database_sync_to_async
    def _current_status(self):
        from apps.traffic.models import TrafficUpdate
        latest = TrafficUpdate.objects.order_by("-timestamp").first()
        return latest.as_feed() if latest else None
