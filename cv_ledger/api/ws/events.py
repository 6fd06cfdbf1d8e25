from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from typing import Dict, Optional
import asyncio
import json
import logging

from cv_ledger.core.config import settings
from cv_ledger.domains.ledger.events import LikeSet

logger = logging.getLogger(__name__)

router = APIRouter()


class ClientConnection:
    """Подписчик с собственной очередью исходящих сообщений"""

    def __init__(self, websocket: WebSocket, client_id: str, queue_size: int):
        self.websocket = websocket
        self.client_id = client_id
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self.sender: Optional[asyncio.Task] = None

    def start(self):
        self.sender = asyncio.create_task(self._drain())

    def enqueue(self, message: str) -> bool:
        """Постановка сообщения в очередь, False если подписчик не успевает"""
        try:
            self.queue.put_nowait(message)
        except asyncio.QueueFull:
            return False
        return True

    async def stop(self):
        if self.sender is not None and not self.sender.done():
            self.sender.cancel()
            try:
                await self.sender
            except asyncio.CancelledError:
                pass

    async def _drain(self):
        while True:
            message = await self.queue.get()
            try:
                await self.websocket.send_text(message)
            except (WebSocketDisconnect, RuntimeError) as e:
                logger.warning(f"Sending to client {self.client_id} failed: {e}")
                return
            finally:
                self.queue.task_done()


class ConnectionManager:
    def __init__(self, queue_size: int = settings.ws_queue_size):
        # Активные подписчики на события реестра: {client_id: connection}
        self.active_connections: Dict[str, ClientConnection] = {}
        self.queue_size = queue_size

    async def connect(self, websocket: WebSocket, client_id: str) -> ClientConnection:
        """Подключение подписчика"""
        await websocket.accept()

        connection = ClientConnection(websocket, client_id, self.queue_size)
        connection.start()

        previous = self.active_connections.get(client_id)
        self.active_connections[client_id] = connection
        if previous is not None:
            logger.info(f"Client {client_id} reconnected, previous connection replaced")
            await previous.stop()

        logger.info(f"Client {client_id} subscribed to ledger events")
        self.send(connection, {"type": "connected", "data": {"client_id": client_id}})
        return connection

    def disconnect(self, client_id: str, connection: Optional[ClientConnection] = None):
        """Отключение подписчика

        Если передано соединение, удаляется только оно: более новое
        соединение с тем же client_id остается.
        """
        current = self.active_connections.get(client_id)

        if current is None or (connection is not None and current is not connection):
            return

        del self.active_connections[client_id]
        if current.sender is not None:
            current.sender.cancel()
        logger.info(f"Client {client_id} unsubscribed from ledger events")

    def send(self, connection: ClientConnection, message: dict):
        if not connection.enqueue(json.dumps(message)):
            logger.warning(f"Dropping client {connection.client_id}: outgoing queue is full")
            self.disconnect(connection.client_id, connection)

    async def broadcast(self, message: dict):
        """Рассылка сообщения всем подписчикам без ожидания отправки"""
        for connection in list(self.active_connections.values()):
            if connection.sender is not None and connection.sender.done():
                self.disconnect(connection.client_id, connection)
                continue
            self.send(connection, message)

    async def handle_event(self, event: LikeSet):
        """Обработчик шины событий реестра"""
        await self.broadcast(event.to_message())

    async def shutdown(self):
        for connection in list(self.active_connections.values()):
            await connection.stop()
        self.active_connections.clear()


manager = ConnectionManager()


@router.websocket("/ws/events/{client_id}")
async def websocket_endpoint(websocket: WebSocket, client_id: str):
    """WebSocket эндпоинт для уведомлений LikeSet"""
    connection = await manager.connect(websocket, client_id)

    try:
        while True:
            data = await websocket.receive_text()

            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                manager.send(connection, {"type": "error", "data": "invalid JSON"})
                continue

            if not isinstance(message, dict):
                manager.send(connection, {"type": "error", "data": "expected a JSON object"})
                continue

            if message.get("type") == "ping":
                # Ответ на ping для поддержания соединения
                manager.send(connection, {"type": "pong"})

    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(client_id, connection)
