# --- aquapark/utils/api.py ---
from flask import jsonify


def api_ok(message, data=None):
    return {
        "status": True,
        "message": message,
        **(data or {}),
    }

def api_error(message, data=None):
    return {
        "status": False,
        "message": message,
        **(data or {}),
    }

def ok(msg, data=None, status=200):
    r = jsonify(api_ok(msg, data)); r.status_code = status; return r

def err(msg, status=400, data=None):
    r = jsonify(api_error(msg, data)); r.status_code = status; return r
