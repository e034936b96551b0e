# Simulated Vehicle Console - Operator CLI
# File: console.py

"""
Interactive operator console for the simulated vehicle.

The interactive console runs on a manual clock: nothing moves until `step`
advances it. `serve` runs the HTTP/WebSocket API with real-time timers.

Usage:
    python console.py                       # interactive GCS> prompt
    python console.py connect step 50       # one-shot command
    python console.py serve --port 8000     # API server
"""

import argparse
import logging
import sys
from typing import List, Optional

from gcs_sim import (
    Coordinate,
    InvalidCoordinateError,
    ManualScheduler,
    SimulatorConfig,
    VehicleSession,
)

logger = logging.getLogger(__name__)

# ============================================================================
# CLI INTERFACE
# ============================================================================

class CLI:
    """Command Line Interface"""

    def __init__(self, session: VehicleSession):
        self.session = session
        self.commands = {
            'connect': self._connect_cmd,
            'disconnect': self._disconnect_cmd,
            'rth': self._return_home_cmd,
            'goto': self._goto_cmd,
            'vpn': self._vpn_cmd,
            'step': self._step_cmd,
            'status': self._status_cmd,
            'telemetry': self._telemetry_cmd,
            'geofence': self._geofence_cmd,
            'path': self._path_cmd,
            'events': self._events_cmd,
            'help': self._help_cmd
        }

    def run(self, args: List[str]) -> bool:
        """Run one CLI command; returns False if it was unknown or rejected"""
        if not args:
            self._help_cmd([])
            return True

        command = args[0]
        if command not in self.commands:
            print(f"✗ Unknown command: {command}")
            self._help_cmd([])
            return False

        return self.commands[command](args[1:]) is not False

    def run_script(self, args: List[str]) -> bool:
        """Run several commands given on one argv, e.g. `connect step 50`"""
        ok = True
        for chunk in self._split_commands(args):
            ok = self.run(chunk) and ok
        return ok

    def _split_commands(self, args: List[str]) -> List[List[str]]:
        chunks: List[List[str]] = []
        for arg in args:
            if arg in self.commands or not chunks:
                chunks.append([arg])
            else:
                chunks[-1].append(arg)
        return chunks

    def _report(self, accepted: bool, ok_msg: str, rejected_msg: str) -> bool:
        print(f"✓ {ok_msg}" if accepted else f"✗ {rejected_msg}")
        return accepted

    def _connect_cmd(self, args: List[str]):
        """Connect and start a fresh session"""
        return self._report(self.session.connect(), "Connected", "Already connected")

    def _disconnect_cmd(self, args: List[str]):
        """Return home, then disconnect"""
        return self._report(
            self.session.disconnect(),
            "Returning home, will disconnect on arrival",
            "Not connected"
        )

    def _return_home_cmd(self, args: List[str]):
        """Return to launch"""
        return self._report(
            self.session.return_home(),
            "Returning home",
            f"Return home rejected (state: {self.session.state.value}, "
            f"speed: {self.session.snapshot.speed:.1f} m/s)"
        )

    def _goto_cmd(self, args: List[str]):
        """Set a navigation target"""
        if len(args) < 2:
            print("Usage: goto <lat> <lon>")
            return False

        try:
            target = Coordinate(float(args[0]), float(args[1]))
        except (ValueError, InvalidCoordinateError) as e:
            print(f"✗ Invalid coordinate: {e}")
            return False

        return self._report(
            self.session.set_target(target),
            f"Target set to ({target.lat:.5f}, {target.lon:.5f})",
            "Target rejected (disconnected or returning home)"
        )

    def _vpn_cmd(self, args: List[str]):
        """Toggle stable link mode"""
        enabled = self.session.toggle_stable_link()
        print(f"ZeroTier VPN: {'ON' if enabled else 'OFF'}")

    def _step_cmd(self, args: List[str]):
        """Advance the simulation clock by N ticks (default 1)"""
        scheduler = self.session.scheduler
        if not isinstance(scheduler, ManualScheduler):
            print("✗ Stepping requires the manual scheduler")
            return False

        try:
            ticks = int(args[0]) if args else 1
        except ValueError:
            print("Usage: step [ticks]")
            return False

        fired = scheduler.step(ticks)
        print(f"Advanced {fired} tick(s)")
        self._telemetry_cmd([])

    def _status_cmd(self, args: List[str]):
        """Overall session status"""
        status = self.session.status()
        target = status['target']

        print(f"\n{'='*60}")
        print("SIMULATED VEHICLE CONSOLE")
        print(f"{'='*60}")
        print(f"State: {status['state'].upper()}  [{status['status_label']}]")
        print(f"Pending disconnect: {'Yes' if status['pending_disconnect'] else 'No'}")
        print(f"Target: {'(%.5f, %.5f)' % (target['lat'], target['lon']) if target else 'None'}")
        print(f"Home: ({status['home']['lat']:.5f}, {status['home']['lon']:.5f})")
        print(f"Link: {'Stable VPN' if status['stable_link'] else 'unstable'}")
        print(f"Timers: {'running' if status['timers_running'] else 'stopped'}")
        print(f"{'='*60}\n")

    def _telemetry_cmd(self, args: List[str]):
        """Current telemetry"""
        if not self.session.connected:
            print("Altitude _ | Speed _ | Battery _ | Coordinates [ _,_ ]")
            return

        t = self.session.snapshot
        speed = f"{t.speed:.1f}m/s" if t.speed > 0.1 else "0 m/s"
        battery = f"{'!!' if t.battery_low else ''}{t.battery:.1f}%"
        fence = " OUTSIDE" if t.outside_geofence else ""
        print(f"Altitude {t.altitude:.0f}m | Speed {speed} | Battery {battery} | "
              f"Coordinates [ {t.position.lat:.5f}, {t.position.lon:.5f} ]{fence} | "
              f"Jitter {t.link_jitter_ms:.0f} ms")

    def _geofence_cmd(self, args: List[str]):
        """Geofence crossing log"""
        log = self.session.geofence_log()
        fence = self.session.geofence.fence

        print(f"\n{'='*70}")
        print(f"Geofence: center ({fence.center.lat:.5f}, {fence.center.lon:.5f}), "
              f"radius {fence.radius_m:.0f}m")
        print(f"{'='*70}")
        if not log:
            print("---No entries yet---")
        for entry in log:
            print(f"-- {entry.timestamp.strftime('%H:%M:%S')}: {entry.kind.value} at "
                  f"({entry.position.lat:.5f}, {entry.position.lon:.5f})")
        print(f"{'='*70}\n")

    def _path_cmd(self, args: List[str]):
        """Last N path points (default 10)"""
        try:
            limit = int(args[0]) if args else 10
        except ValueError:
            print("Usage: path [count]")
            return False

        path = self.session.path()
        print(f"{len(path)} point(s) recorded")
        for point in path[-limit:] if limit > 0 else []:
            print(f"  ({point.lat:.6f}, {point.lon:.6f})")

    def _events_cmd(self, args: List[str]):
        """Recent session events"""
        try:
            limit = int(args[0]) if args else 20
        except ValueError:
            print("Usage: events [count]")
            return False

        for event in self.session.event_router.recent(limit):
            print(f"{event.timestamp.strftime('%H:%M:%S')} {event.type:<32} "
                  f"[{event.priority.name}] {event.data}")

    def _help_cmd(self, args: List[str]):
        """Show help"""
        print("\n" + "="*70)
        print("Simulated Vehicle Console - Operator CLI")
        print("="*70)
        print("\nCommands:")
        print("  connect            - Connect and start a fresh session")
        print("  disconnect         - Return home, then disconnect")
        print("  rth                - Return to launch (vehicle must be stopped)")
        print("  goto <lat> <lon>   - Fly to a coordinate")
        print("  vpn                - Toggle stable link (ZeroTier VPN)")
        print("  step [ticks]       - Advance the simulation clock")
        print("  status             - Show session status")
        print("  telemetry          - Show current telemetry")
        print("  geofence           - Show geofence crossing log")
        print("  path [count]       - Show recent path points")
        print("  events [count]     - Show recent session events")
        print("  help               - Show this help")
        print("="*70 + "\n")

# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Operator console for a simulated aerial vehicle",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python console.py
  python console.py connect goto 26.9260 75.8290 step 100 geofence
  python console.py serve --port 8000
        """
    )
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: WARNING)')
    parser.add_argument('--tick-ms', type=int, help='Position tick period in milliseconds')
    parser.add_argument('--speed', type=float, help='Cruise speed in m/s')
    parser.add_argument('--geofence-radius', type=float, help='Geofence radius in meters')
    parser.add_argument('--history-limit', type=int,
                        help='Keep only the last N path points and geofence entries')
    parser.add_argument('--host', help='API bind address (serve only)')
    parser.add_argument('--port', type=int, help='API port (serve only)')
    parser.add_argument('command', nargs=argparse.REMAINDER,
                        help="Console commands, or 'serve' to run the API")
    return parser


def config_from_args(args: argparse.Namespace,
                     config: Optional[SimulatorConfig] = None) -> SimulatorConfig:
    config = config or SimulatorConfig.from_env()
    if args.tick_ms is not None:
        config.tick_ms = args.tick_ms
    if args.speed is not None:
        config.cruise_speed_mps = args.speed
    if args.geofence_radius is not None:
        config.geofence_radius_m = args.geofence_radius
    if args.history_limit is not None:
        config.history_limit = args.history_limit
    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    return config


def serve(config: SimulatorConfig):
    import uvicorn

    import api_server
    from gcs_sim import AsyncioScheduler

    api_server.session = VehicleSession(
        config,
        scheduler=AsyncioScheduler(config.tick_ms, config.jitter_period_ms)
    )
    uvicorn.run(api_server.app, host=config.host, port=config.port)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    config = config_from_args(args)

    if args.command[:1] == ['serve']:
        # options may also follow the subcommand: `serve --port 8001`
        serve(config_from_args(build_parser().parse_args(args.command[1:]), config))
        return 0

    session = VehicleSession(
        config,
        scheduler=ManualScheduler(config.tick_ms, config.jitter_period_ms)
    )
    cli = CLI(session)

    if args.command:
        return 0 if cli.run_script(args.command) else 1

    print("\nType 'help' for commands, 'exit' to quit\n")

    while True:
        try:
            command = input("GCS> ").strip()

            if command.lower() in ['exit', 'quit']:
                session.shutdown()
                print("Goodbye!")
                break

            if command:
                cli.run(command.split())

        except (KeyboardInterrupt, EOFError):
            session.shutdown()
            print("\nGoodbye!")
            break
        except Exception as e:
            logger.debug("Command failed", exc_info=True)
            print(f"✗ Error: {e}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
