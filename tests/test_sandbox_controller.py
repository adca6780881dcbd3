from __future__ import annotations

import io
import unittest
from contextlib import redirect_stdout

from iot_sandbox.controllers import SandboxController
from iot_sandbox.errors import SandboxError, SimulationNotReady, UnknownComponentError
from iot_sandbox.simulators import ManualTimerSource

QUIET = {"log": {"echo": False}}


class FixedRandom:
    def __init__(self, delta):
        self.delta = delta

    def uniform(self, a, b):
        return max(a, min(b, self.delta))


class TestSandboxController(unittest.TestCase):
    def setUp(self) -> None:
        self.timers = ManualTimerSource()
        self.controller = SandboxController(QUIET, timer_source=self.timers, rng=FixedRandom(1.0))

    def tearDown(self) -> None:
        self.controller.cleanup()

    def test_place_assigns_unique_ids_and_default_reading(self) -> None:
        first = self.controller.place_component("temp-humidity-sensor", (10, 20))
        second = self.controller.place_component("temp-humidity-sensor")
        self.assertEqual(first, "temp-humidity-sensor-1")
        self.assertEqual(second, "temp-humidity-sensor-2")
        comp = self.controller.world.get_component(first)
        self.assertEqual(comp.position, (10, 20))
        self.assertEqual(comp.state.value, 25)

    def test_place_unknown_definition_raises(self) -> None:
        with self.assertRaises(UnknownComponentError) as ctx:
            self.controller.place_component("flux-capacitor")
        self.assertEqual(str(ctx.exception), "Unknown component: flux-capacitor")
        self.assertEqual(self.controller.world.components, ())

    def test_microbit_plugs_into_expansion_board(self) -> None:
        self.controller.place_component("expansion-board")
        self.assertEqual(self.controller.world.wires, ())
        self.controller.place_component("microbit")
        wires = self.controller.world.wires
        self.assertEqual(len(wires), 5)
        roles = {w.to_pin: w.role for w in wires}
        self.assertEqual(roles["slot-3v"], "power")
        self.assertEqual(roles["slot-gnd"], "ground")
        self.assertEqual(roles["slot-p0"], "data")
        # a second micro:bit does not add another slot harness
        self.controller.place_component("microbit")
        self.assertEqual(len(self.controller.world.wires), 5)

    def test_remove_component_cascades_wires(self) -> None:
        self.controller.place_component("microbit")
        self.controller.place_component("expansion-board")
        sensor = self.controller.place_component("temp-humidity-sensor")
        self.controller.request_wire(sensor, "vcc", "expansion-board-1", "3v-out1")
        self.controller.request_wire(sensor, "gnd", "expansion-board-1", "gnd-out1")
        self.assertEqual(len(self.controller.world.wires), 7)

        removed = self.controller.remove_component("expansion-board-1")
        self.assertEqual(removed, 7)
        self.assertEqual(self.controller.world.wires, ())
        self.assertEqual(self.controller.world.wire_keys, frozenset())

    def test_remove_unknown_component_is_noop(self) -> None:
        self.controller.place_component("microbit")
        world = self.controller.world
        self.assertEqual(self.controller.remove_component("ghost-1"), 0)
        self.assertIs(self.controller.world, world)

    def test_request_wire_persists_valid_wire(self) -> None:
        self.controller.place_component("expansion-board")
        sensor = self.controller.place_component("light-sensor")
        result = self.controller.request_wire(sensor, "vcc", "expansion-board-1", "3v-out1")
        self.assertTrue(result.valid)
        wire = self.controller.world.wires[-1]
        self.assertEqual(wire.role, "power")
        self.assertTrue(self.controller.evaluate().power_status[sensor])

    def test_invalid_wire_not_persisted(self) -> None:
        self.controller.place_component("expansion-board")
        module = self.controller.place_component("iot-module")
        result = self.controller.request_wire(module, "tx", "expansion-board-1", "p16")
        self.assertFalse(result.valid)
        self.assertEqual(self.controller.world.wires, ())

    def test_duplicate_wire_rejected_in_either_direction(self) -> None:
        self.controller.place_component("expansion-board")
        sensor = self.controller.place_component("sound-sensor")
        self.assertTrue(self.controller.request_wire(sensor, "vcc", "expansion-board-1", "3v-out1").valid)

        again = self.controller.request_wire(sensor, "vcc", "expansion-board-1", "3v-out1")
        reverse = self.controller.request_wire("expansion-board-1", "3v-out1", sensor, "vcc")
        for result in (again, reverse):
            self.assertFalse(result.valid)
            self.assertIn("Connection already exists", result.errors)
        self.assertEqual(len(self.controller.world.wires), 1)

    def test_remove_wire(self) -> None:
        self.controller.place_component("expansion-board")
        sensor = self.controller.place_component("sound-sensor")
        self.controller.request_wire(sensor, "vcc", "expansion-board-1", "3v-out1")
        wire_id = self.controller.world.wires[0].id
        self.controller.remove_wire(wire_id)
        self.assertEqual(self.controller.world.wires, ())
        self.assertFalse(self.controller.world.has_wire(sensor, "vcc", "expansion-board-1", "3v-out1"))

    def test_move_and_set_value(self) -> None:
        sensor = self.controller.place_component("light-sensor")
        self.controller.move_component(sensor, (40, 50))
        self.controller.set_sensor_value(sensor, 800)
        comp = self.controller.world.get_component(sensor)
        self.assertEqual(comp.position, (40, 50))
        self.assertEqual(comp.state.value, 800)
        with self.assertRaises(UnknownComponentError):
            self.controller.move_component("ghost-1", (0, 0))

    def test_set_value_on_component_removed_midway(self) -> None:
        sensor = self.controller.place_component("light-sensor")
        store = self.controller.store
        update = store.update

        def remove_then_update(fn):
            store.update = update
            self.controller.remove_component(sensor)
            return update(fn)

        store.update = remove_then_update
        self.controller.set_sensor_value(sensor, 800)
        self.assertIsNone(self.controller.world.get_component(sensor))

    def test_set_value_on_unknown_component_raises(self) -> None:
        with self.assertRaises(UnknownComponentError):
            self.controller.set_sensor_value("ghost-1", 1)

    def test_deploy_logs_code_actions(self) -> None:
        self.controller.load_scenario("classroom-temperature")
        result = self.controller.deploy_code()
        self.assertEqual(result.display_value, 25)
        messages = [e.message for e in self.controller.log.entries() if e.source == "micro:bit"]
        self.assertEqual(messages, [
            "Code deployed",
            "Read temperature: 25°C",
            "LED display scrolling text",
            "Sending HTTP GET request",
        ])

    def test_auto_fluctuation_toggle(self) -> None:
        self.assertTrue(self.controller.status()["auto_fluctuation"])
        self.assertFalse(self.controller.set_auto_fluctuation(False))
        self.controller.load_scenario("classroom-temperature")
        self.assertFalse(self.controller.world.clock.auto_fluctuation)

        self.controller.deploy_code()
        self.controller.set_running(True)
        self.timers.advance(2000)
        self.assertEqual(self.controller.world.get_component("temp-sensor-1").state.value, 25)

    def test_auto_fluctuation_from_settings(self) -> None:
        settings = {"log": {"echo": False}, "simulation": {"auto_fluctuation": False}}
        controller = SandboxController(settings, timer_source=ManualTimerSource())
        self.assertFalse(controller.world.clock.auto_fluctuation)
        self.assertEqual(controller.scheduler.dispatch_period_ms, 3000)

    def test_speed_is_clamped(self) -> None:
        self.assertEqual(self.controller.set_speed(5), 3.0)
        self.assertEqual(self.controller.set_speed(0.1), 0.5)
        self.assertEqual(self.controller.set_speed(1.5), 1.5)
        self.assertEqual(self.controller.world.clock.speed, 1.5)

    def test_new_code_requires_redeploy(self) -> None:
        self.controller.deploy_code()
        self.assertTrue(self.controller.world.code_deployed)
        self.controller.set_code("display.scroll('hi')")
        self.assertFalse(self.controller.world.code_deployed)
        self.assertEqual(self.controller.world.code, "display.scroll('hi')")

    def test_start_on_empty_sandbox_lists_issues(self) -> None:
        with self.assertRaises(SimulationNotReady) as ctx:
            self.controller.set_running(True)
        self.assertIn("A micro:bit mainboard is required", ctx.exception.issues)
        self.assertEqual(self.controller.status()["state"], "STOPPED")

    def test_classroom_scenario_end_to_end(self) -> None:
        self.controller.load_scenario("classroom-temperature")
        self.controller.deploy_code()
        self.controller.set_server_running(True)
        self.controller.set_running(True)
        self.timers.advance(3000)

        response = self.controller.query_database()
        self.assertEqual(response.status, 200)
        self.assertEqual([row["value"] for row in response.body], [26.0])

        self.controller.set_running(False)
        self.assertFalse(self.controller.status()["running"])

    def test_log_is_bounded(self) -> None:
        self.controller.load_scenario("classroom-temperature")
        self.controller.deploy_code()
        self.controller.set_server_running(True)
        self.controller.set_running(True)
        self.timers.advance(3000 * 40)
        self.assertEqual(len(self.controller.log), 100)

    def test_load_scenario_stops_simulation_and_keeps_speed(self) -> None:
        self.controller.set_speed(2.0)
        self.controller.load_scenario("classroom-temperature")
        self.controller.deploy_code()
        self.controller.set_running(True)
        self.controller.load_scenario("smart-irrigation")
        self.assertEqual(self.controller.scheduler.get_state(), "STOPPED")
        self.assertEqual(self.timers.pending(), 0)
        self.assertEqual(self.controller.world.clock.speed, 2.0)
        self.assertIsNotNone(self.controller.world.get_component("relay-1"))

    def test_unknown_scenario_raises(self) -> None:
        with self.assertRaises(SandboxError):
            self.controller.load_scenario("moon-base")

    def test_new_wire_ids_skip_scenario_ids(self) -> None:
        self.controller.load_scenario("classroom-temperature")
        self.controller.place_component("light-sensor")
        self.controller.request_wire("light-sensor-1", "vcc", "expansion-1", "3v-out3")
        ids = [w.id for w in self.controller.world.wires]
        self.assertEqual(len(ids), len(set(ids)))

    def test_status_reports_live_power(self) -> None:
        self.controller.load_scenario("classroom-temperature")
        status = self.controller.status()
        powered = {c["instance_id"]: c["state"]["powered"] for c in status["components"]}
        self.assertTrue(powered["temp-sensor-1"])
        self.assertEqual(status["issues"], [])
        self.assertEqual(len(status["wires"]), 8)

    def test_reset_restores_empty_world(self) -> None:
        self.controller.load_scenario("classroom-temperature")
        self.controller.reset()
        self.assertEqual(self.controller.world.components, ())
        self.assertEqual(self.controller.world.router.ssid, "School_WiFi")
        self.assertEqual(len(self.controller.log), 0)


class TestCommands(unittest.TestCase):
    def setUp(self) -> None:
        self.controller = SandboxController(QUIET, timer_source=ManualTimerSource())

    def tearDown(self) -> None:
        self.controller.cleanup()

    def run_command(self, cmd):
        out = io.StringIO()
        with redirect_stdout(out):
            result = self.controller.handle_command(cmd)
        return result, out.getvalue()

    def test_unknown_command(self) -> None:
        self.assertIsNone(self.run_command("zz")[0])
        self.assertIsNone(self.run_command("")[0])

    def test_add_and_wire_commands(self) -> None:
        self.assertTrue(self.run_command("a expansion-board")[0])
        self.assertTrue(self.run_command("a temp-humidity-sensor 10 20")[0])
        handled, out = self.run_command("w temp-humidity-sensor-1.vcc expansion-board-1.3v-out1")
        self.assertTrue(handled)
        self.assertIn("[WIRE] OK (power)", out)

    def test_malformed_endpoint_raises(self) -> None:
        with self.assertRaises(SandboxError):
            self.run_command("w microbit-1 expansion-board-1.p0")

    def test_start_command_prints_issues(self) -> None:
        handled, out = self.run_command("g")
        self.assertTrue(handled)
        self.assertIn("A micro:bit mainboard is required", out)

    def test_fluctuation_command_toggles(self) -> None:
        handled, out = self.run_command("f")
        self.assertTrue(handled)
        self.assertIn("[SIM] Auto fluctuation OFF", out)
        self.assertFalse(self.controller.world.clock.auto_fluctuation)

    def test_speed_commands(self) -> None:
        self.run_command("+")
        self.assertEqual(self.controller.world.clock.speed, 1.5)
        self.run_command("-")
        self.run_command("-")
        self.run_command("-")
        self.assertEqual(self.controller.world.clock.speed, 0.5)


if __name__ == "__main__":
    unittest.main()
