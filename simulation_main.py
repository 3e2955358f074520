#!/usr/bin/env python3
"""
Room Sweep - Headless Simulation Entry Point

=============================================================================
The building is UNKNOWN to the robots. The exploration core may ONLY use:
- its own occupancy map, filled by the simulated range sensor
- messages received from other robots
Ground truth is used by the simulator (sensing, collisions), never by the
decision logic.
=============================================================================

Mission:
1. Every robot finds a first wall, then covers its room
2. Doorways found on the way are auctioned between the robots
3. Robots move through doorways until none are left unexplored
4. The run ends when every robot is DONE or the tick limit is reached

Usage:
    python simulation_main.py --robots 3 --layout three_rooms --ticks 3000
"""

import argparse
import sys
import time

from roomsweep.algorithm_config import ALGORITHM, ALGORITHM_INFO, COMM_RANGE
from simulation.environment import LAYOUTS, Environment
from simulation.robot_manager import RobotManager

COVERAGE_MILESTONES = (25, 50, 75, 90, 100)


class RoomSweepSimulation:
    """Headless simulation orchestrating the environment and the robot team."""

    def __init__(self, robots: int = 2, layout: str = "two_rooms",
                 comm_range=COMM_RANGE, seed=None, debug: bool = False):
        self.environment = Environment(layout)
        self.manager = RobotManager(self.environment, count=robots, comm_range=comm_range,
                                    seed=seed, debug=debug)
        self.manager.initialize()
        info = ALGORITHM_INFO[ALGORITHM]
        print(f"Using algorithm: {info['name']} - {info['description']}")

    def run(self, max_ticks: int) -> dict:
        """Run to completion or max_ticks; returns the final debug info."""
        start = time.time()
        reported = set()
        while self.manager.tick < max_ticks and not self.manager.all_done():
            self.manager.step()
            coverage = self.manager.get_coverage()
            for milestone in COVERAGE_MILESTONES:
                if coverage >= milestone and milestone not in reported:
                    reported.add(milestone)
                    print(f"[COVERAGE] {milestone}% at tick {self.manager.tick}")

        info = self.manager.get_combined_debug_info()
        if info['all_done']:
            print(f"ALL ROBOTS DONE after {info['tick']} ticks")
        else:
            print(f"TICK LIMIT! {max_ticks} ticks reached")
        print(f"Final coverage: {info['coverage_pct']}% ({time.time() - start:.1f}s wall clock)")
        for robot in info['robots']:
            print(f"  R{robot['robot_id']}: {robot['state']:<18} doorways known "
                  f"{robot['doorways_known']}, traversed {robot['doorways_traversed']}, "
                  f"auctions won {robot['auctions_won']}, collisions {robot['collisions']}")
        return info


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Multi-robot room sweep simulation")
    parser.add_argument("--robots", type=int, default=2, help="number of robots")
    parser.add_argument("--layout", choices=sorted(LAYOUTS), default="two_rooms",
                        help="building layout")
    parser.add_argument("--ticks", type=int, default=3000, help="maximum logic ticks")
    parser.add_argument("--seed", type=int, default=None, help="seed for message delivery order")
    parser.add_argument("--comm-range", type=float, default=COMM_RANGE,
                        help="communication range in tiles (default unlimited)")
    parser.add_argument("--debug", action="store_true", help="per-robot decision prints")
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    try:
        args = parse_args(argv)
        simulation = RoomSweepSimulation(robots=args.robots, layout=args.layout,
                                         comm_range=args.comm_range, seed=args.seed,
                                         debug=args.debug)
        simulation.run(args.ticks)
    except KeyboardInterrupt:
        print("\nSimulation interrupted by user.")
    except Exception as e:
        print(f"Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
