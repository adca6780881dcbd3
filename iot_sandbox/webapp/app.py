"""Flask control surface for a browser front end."""

import threading

from flask import Flask, jsonify, request

from iot_sandbox.components import CATALOG
from iot_sandbox.controllers import SandboxController
from iot_sandbox.errors import SimulationNotReady, UnknownComponentError, SandboxError
from iot_sandbox.scenarios import SCENARIOS
from iot_sandbox.settings import load_settings

app = Flask(__name__)

controller_lock = threading.Lock()
controller = None


def get_controller():
    global controller
    with controller_lock:
        if controller is None:
            controller = SandboxController(load_settings())
        return controller


@app.errorhandler(UnknownComponentError)
def handle_unknown_component(exc):
    return jsonify({"error": str(exc)}), 404


@app.errorhandler(SandboxError)
def handle_sandbox_error(exc):
    return jsonify({"error": str(exc)}), 400


@app.errorhandler(ValueError)
@app.errorhandler(TypeError)
def handle_bad_payload(exc):
    return jsonify({"error": f"Invalid request payload: {exc}"}), 400


@app.route("/api/status")
def api_status():
    return jsonify(get_controller().status())


@app.route("/api/catalog")
def api_catalog():
    return jsonify([definition.as_dict() for definition in CATALOG.values()])


@app.route("/api/components", methods=["POST"])
def api_place_component():
    payload = request.get_json(silent=True) or {}
    position = payload.get("position") or {}
    instance_id = get_controller().place_component(
        payload.get("definition_id"),
        (int(position.get("x", 0)), int(position.get("y", 0))),
    )
    return jsonify({"instance_id": instance_id}), 201


@app.route("/api/components/<instance_id>", methods=["DELETE"])
def api_remove_component(instance_id):
    removed = get_controller().remove_component(instance_id)
    return jsonify({"ok": True, "wires_removed": removed})


@app.route("/api/components/<instance_id>/position", methods=["POST"])
def api_move_component(instance_id):
    payload = request.get_json(silent=True) or {}
    get_controller().move_component(
        instance_id, (int(payload.get("x", 0)), int(payload.get("y", 0)))
    )
    return jsonify({"ok": True})


@app.route("/api/wires", methods=["POST"])
def api_request_wire():
    payload = request.get_json(silent=True) or {}
    result = get_controller().request_wire(
        payload.get("from_instance"),
        payload.get("from_pin"),
        payload.get("to_instance"),
        payload.get("to_pin"),
    )
    return jsonify(result.as_dict()), (201 if result.valid else 400)


@app.route("/api/wires/<wire_id>", methods=["DELETE"])
def api_remove_wire(wire_id):
    get_controller().remove_wire(wire_id)
    return jsonify({"ok": True})


@app.route("/api/simulation/start", methods=["POST"])
def api_simulation_start():
    try:
        get_controller().set_running(True)
    except SimulationNotReady as exc:
        return jsonify({"ok": False, "issues": exc.issues}), 409
    return jsonify({"ok": True})


@app.route("/api/simulation/stop", methods=["POST"])
def api_simulation_stop():
    get_controller().set_running(False)
    return jsonify({"ok": True})


@app.route("/api/simulation/speed", methods=["POST"])
def api_simulation_speed():
    payload = request.get_json(silent=True) or {}
    speed = get_controller().set_speed(float(payload.get("speed", 1.0)))
    return jsonify({"speed": speed})


@app.route("/api/simulation/fluctuation", methods=["POST"])
def api_simulation_fluctuation():
    payload = request.get_json(silent=True) or {}
    enabled = get_controller().set_auto_fluctuation(bool(payload.get("enabled", True)))
    return jsonify({"auto_fluctuation": enabled})


@app.route("/api/code", methods=["POST"])
def api_set_code():
    payload = request.get_json(silent=True) or {}
    get_controller().set_code(str(payload.get("code", "")))
    return jsonify({"ok": True, "code_deployed": False})


@app.route("/api/code/deploy", methods=["POST"])
def api_deploy_code():
    result = get_controller().deploy_code()
    return jsonify({
        "ok": True,
        "code_deployed": True,
        "actions": list(result.actions),
        "display_value": result.display_value,
    })


@app.route("/api/server", methods=["POST"])
def api_server():
    payload = request.get_json(silent=True) or {}
    get_controller().set_server_running(bool(payload.get("running", False)))
    return jsonify(get_controller().world.server.as_dict())


@app.route("/api/router", methods=["POST"])
def api_router():
    payload = request.get_json(silent=True) or {}
    fields = {k: str(v) for k, v in payload.items() if k in ("ssid", "password", "ip")}
    get_controller().update_router(**fields)
    return jsonify(get_controller().world.router.as_dict())


@app.route("/api/logs")
def api_logs():
    return jsonify([entry.as_dict() for entry in get_controller().log.entries()])


@app.route("/api/database")
def api_database():
    return jsonify(get_controller().world.database.as_dict())


@app.route("/api/database/query")
def api_database_query():
    response = get_controller().query_database()
    return jsonify(response.body), response.status


@app.route("/api/scenarios")
def api_scenarios():
    return jsonify([{"id": key, "name": name} for key, (name, _) in SCENARIOS.items()])


@app.route("/api/scenarios/<scenario_id>", methods=["POST"])
def api_load_scenario(scenario_id):
    get_controller().load_scenario(scenario_id)
    return jsonify({"ok": True})


if __name__ == "__main__":
    web_cfg = load_settings().get("webapp", {})
    app.run(
        host=web_cfg.get("host", "0.0.0.0"),
        port=int(web_cfg.get("port", 8080)),
        debug=bool(web_cfg.get("debug", False)),
    )
