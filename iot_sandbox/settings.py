import json
import os

DEFAULT_SETTINGS = {
    "simulation": {
        "fluctuation_period_ms": 2000,
        "dispatch_period_ms": 3000,
        "speed": 1.0,
        "auto_fluctuation": True,
    },
    "log": {
        "max_entries": 100,
        "echo": True,
    },
    "server": {
        "ip": "192.168.1.100",
        "port": 5000,
        "running": False,
        "routes": [
            {"path": "/upload", "method": "GET", "handler": "upload_data"},
            {"path": "/query", "method": "GET", "handler": "query_data"},
        ],
    },
    "router": {
        "ssid": "School_WiFi",
        "password": "12345678",
        "ip": "192.168.1.1",
    },
    "scenario": None,
    "webapp": {
        "host": "0.0.0.0",
        "port": 8080,
        "debug": False,
    },
}


def load_settings(filePath='settings.json'):
    if not os.path.isabs(filePath):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        filePath = os.path.join(base_dir, filePath)
    with open(filePath, 'r') as f:
        settings = json.load(f)
    return merge_defaults(settings)


def merge_defaults(settings):
    """Fill in any section or key missing from a loaded settings dict."""
    merged = {}
    for key, default in DEFAULT_SETTINGS.items():
        value = settings.get(key, default)
        if isinstance(default, dict) and isinstance(value, dict):
            section = dict(default)
            section.update(value)
            value = section
        merged[key] = value
    for key, value in settings.items():
        if key not in merged:
            merged[key] = value
    return merged
