"""
Stand-in for the classroom Flask + SQLite server.

dispatch() maps a simulated HTTP request onto the routes declared in a
ServerConfig and returns a response plus, for writes, a new DatabaseSnapshot.
It never touches a socket or a real database and never modifies its inputs;
the caller commits ``updated_database`` back into the world.

Handlers:
  upload_data  GET /upload?temperature=<float>  -> append to sensorlog
  query_data   GET /query                       -> newest 10 sensorlog rows
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from urllib.parse import parse_qs, urlsplit

from iot_sandbox.models import SENSORLOG_TABLE

SENSORLOG_LIMIT = 100
QUERY_LIMIT = 10
UPLOAD_SENSOR_ID = 1


@dataclass(frozen=True)
class HttpRequest:
    method: str
    path: str
    body: dict = None


@dataclass(frozen=True)
class HttpResponse:
    status: int
    body: object = field(default_factory=dict)

    @property
    def ok(self):
        return 200 <= self.status < 300


@dataclass(frozen=True)
class DispatchResult:
    response: HttpResponse
    updated_database: object = None


def _split_path(path):
    parts = urlsplit(path)
    return parts.path, parse_qs(parts.query)


def _match_route(routes, method, path):
    method = method.upper()
    for route in routes:
        if route.path == path and route.method.upper() == method:
            return route
    return None


def _parse_temperature(query, body):
    raw = None
    if query.get('temperature'):
        raw = query['temperature'][0]
    elif body and 'temperature' in body:
        raw = body['temperature']
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def _timestamp(now):
    if now is None:
        now = datetime.now(timezone.utc)
    return now.isoformat()


def _next_id(rows):
    return max((row.get('id', 0) for row in rows), default=0) + 1


def upload_data(request, query, database, now=None):
    temperature = _parse_temperature(query, request.body)
    if temperature is None:
        return DispatchResult(HttpResponse(400, {'error': 'Invalid temperature parameter'}))

    rows = database.rows(SENSORLOG_TABLE)
    record = {
        'id': _next_id(rows),
        'sensor_id': UPLOAD_SENSOR_ID,
        'value': temperature,
        'timestamp': _timestamp(now),
    }
    rows = (rows + (record,))[-SENSORLOG_LIMIT:]

    body = {
        'status': 'success',
        'id': record['id'],
        'message': f"Temperature {temperature}°C recorded",
    }
    return DispatchResult(HttpResponse(200, body), database.with_rows(SENSORLOG_TABLE, rows))


def query_data(request, query, database, now=None):
    rows = database.rows(SENSORLOG_TABLE)
    recent = [dict(row) for row in reversed(rows[-QUERY_LIMIT:])]
    return DispatchResult(HttpResponse(200, recent))


HANDLERS = {
    'upload_data': upload_data,
    'query_data': query_data,
}


def dispatch(request, server_config, database, now=None):
    route = _match_route(server_config.routes, request.method, request.path)
    path, query = _split_path(request.path)
    if route is None:
        route = _match_route(server_config.routes, request.method, path)
    if route is None:
        return DispatchResult(HttpResponse(404, {'error': 'Not Found'}))

    handler = HANDLERS.get(route.handler)
    if handler is None:
        return DispatchResult(HttpResponse(200, {'message': 'OK'}))
    return handler(request, query, database, now=now)
