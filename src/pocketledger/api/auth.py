"""Device authentication routes."""

from flask import Blueprint, jsonify, request

from pocketledger.api.app import bearer_token, services
from pocketledger.api.serializers import device_to_json
from pocketledger.api.transactions import json_body, optional_json_body
from pocketledger.domain.errors import ValidationError

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/master-password")
def master_password():
    body = json_body()
    token = services().devices.authenticate_with_master_password(
        password=body.get("password"),
        device_id=body.get("deviceId") or request.headers.get("X-Device-ID", ""),
        device_name=body.get("deviceName"),
        user_agent=request.headers.get("User-Agent", ""),
    )
    if token is None:
        # Same answer for a wrong password and a missing configuration
        return jsonify({"success": False, "error": "Authentication failed"}), 401
    return jsonify({"success": True, "token": token})


@auth_bp.post("/validate-device")
def validate_device():
    body = request.get_json(silent=True)
    token = bearer_token()
    if token is None and isinstance(body, dict):
        token = body.get("token")
    if not services().devices.validate_device_token(token):
        return jsonify({"valid": False}), 401
    return jsonify({"valid": True})


@auth_bp.get("/devices")
def list_devices():
    return jsonify([device_to_json(d) for d in services().devices.list_devices()])


@auth_bp.delete("/devices/<device_id>")
def revoke_device(device_id: str):
    if not services().devices.revoke_device(device_id):
        return jsonify({"success": False, "error": f"Device {device_id} not found"}), 404
    return jsonify({"success": True})


@auth_bp.post("/devices/cleanup")
def cleanup_devices():
    body = optional_json_body()
    retention_days = body.get("retentionDays", services().settings.device_retention_days)
    if isinstance(retention_days, bool):
        raise ValidationError("retentionDays must be an integer")
    try:
        retention_days = int(retention_days)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError("retentionDays must be an integer")
    count = services().devices.cleanup_old_devices(retention_days)
    return jsonify({"deactivated": count})
