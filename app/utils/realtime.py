# app/utils/realtime.py
from typing import Any, Dict, List
from datetime import date, datetime
from fastapi import WebSocket
import enum
import uuid
import logging

logger = logging.getLogger(__name__)

CHANGE_EVENTS = ("INSERT", "UPDATE", "DELETE")


def serialize_record(record: Any) -> Dict[str, Any]:
    """Column values of an ORM row (or a plain dict) as JSON-friendly data"""
    if isinstance(record, dict):
        data = dict(record)
    else:
        data = {column.key: getattr(record, column.key) for column in record.__table__.columns}

    for key, value in data.items():
        if isinstance(value, uuid.UUID):
            data[key] = str(value)
        elif isinstance(value, (datetime, date)):
            data[key] = value.isoformat()
        elif isinstance(value, enum.Enum):
            data[key] = value.value
    return data


def change_record(table: str, event: str, record: Any) -> Dict[str, Any]:
    if event not in CHANGE_EVENTS:
        raise ValueError(f"Unknown change event: {event}")
    return {"table": table, "event": event, "record": serialize_record(record)}


def apply_change(snapshot: List[Dict[str, Any]], change: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Fold one change record into a client-side list of rows.

    Returns a new list; inserts go to the front (newest first), updates
    replace the row with the same id and deletes drop it.
    """
    record = change["record"]
    record_id = record.get("id")
    event = change["event"]

    if event == "INSERT":
        return [record] + [row for row in snapshot if row.get("id") != record_id]
    if event == "UPDATE":
        return [record if row.get("id") == record_id else row for row in snapshot]
    if event == "DELETE":
        return [row for row in snapshot if row.get("id") != record_id]
    return list(snapshot)


class ConnectionManager:
    """Active WebSocket connections by user_id"""

    def __init__(self):
        self.active_connections: Dict[uuid.UUID, List[WebSocket]] = {}

    def connect(self, websocket: WebSocket, user_id: uuid.UUID):
        """Register a new WebSocket connection for a user"""
        self.active_connections.setdefault(user_id, []).append(websocket)
        logger.info(f"User {user_id} connected. Total connections: {len(self.active_connections[user_id])}")

    def disconnect(self, websocket: WebSocket, user_id: uuid.UUID):
        """Remove a WebSocket connection for a user"""
        connections = self.active_connections.get(user_id, [])
        if websocket in connections:
            connections.remove(websocket)

        # Clean up if no connections left
        if user_id in self.active_connections and not connections:
            del self.active_connections[user_id]

        logger.info(f"User {user_id} disconnected. Remaining connections: {len(self.active_connections.get(user_id, []))}")

    async def push(self, user_id: uuid.UUID, table: str, event: str, record: Any):
        """Send a change record to every connection of the user, if any"""
        if user_id not in self.active_connections:
            return

        message = change_record(table, event, record)
        dead_connections = []
        for websocket in self.active_connections[user_id]:
            try:
                await websocket.send_json(message)
            except Exception as e:
                logger.error(f"Failed to send to websocket: {str(e)}")
                dead_connections.append(websocket)

        for dead in dead_connections:
            self.disconnect(dead, user_id)


manager = ConnectionManager()
