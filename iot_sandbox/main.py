#!/usr/bin/env python3
"""
IoT Sandbox - console controller
"""

from iot_sandbox.controllers import SandboxController
from iot_sandbox.errors import SandboxError
from iot_sandbox.settings import load_settings


def show_help():
    """Display help menu"""
    print("""
==================================================
COMMANDS
==================================================
  s - Status          h - Help            e - Exit

  TOPOLOGY:
  l                   - List catalog
  a <def> [x y]       - Add component
  r <instance>        - Remove component
  w <inst.pin> <inst.pin> - Wire two pins
  u <wire id>         - Remove wire
  c <scenario>        - Load scenario

  SIMULATION:
  d - Deploy code     v - Toggle server
  g - Start           x - Stop
  + - Faster          - - Slower
  f - Toggle auto fluctuation
  q - Query database  log - Show log
==================================================""")


def main():
    """Main entry point"""
    print("\n" + "=" * 50)
    print("  IoT SANDBOX")
    print("=" * 50 + "\n")

    settings = load_settings()
    controller = SandboxController(settings)

    print("\n[SYSTEM] Running...  (press 'h' for help)\n")
    show_help()

    running = True
    while running:
        try:
            cmd = input("\n> ").strip()

            if not cmd:
                continue
            elif cmd == 'h':
                show_help()
            elif cmd == 's':
                controller.show_status()
            elif cmd == 'e':
                running = False
                print("\nExiting...")
            else:
                result = controller.handle_command(cmd)
                if result is None:
                    print("Unknown command. Press 'h' for help.")

        except (KeyboardInterrupt, EOFError):
            running = False
            print("\n\nExiting...")
        except (SandboxError, ValueError) as e:
            print(f"[ERROR] {e}")

    controller.cleanup()
    print("[SYSTEM] Done.")


if __name__ == "__main__":
    main()
