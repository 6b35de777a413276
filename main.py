#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
  PROJECTILE MOTION SIMULATOR — Headless Runner
═══════════════════════════════════════════════════════════════════════════════

  Executes the reference scenario end to end without a window:
    1. Analytic model (T, R, H)
    2. Live loop driven by synthetic 60 Hz frame timestamps
    3. Target hit scenario (target on the landing point)
    4. Semi-implicit vs explicit Euler comparison
    5. Convergence study against the closed form
    6. Animated flight GIF

  All outputs saved to outputs/ directory.

  Usage:
    python main.py              # Run everything
    python main.py --quick      # Skip animation (faster)
    python -m projectile_sim.app    # Interactive window
═══════════════════════════════════════════════════════════════════════════════
"""

import argparse
import logging
import os
import time

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from projectile_sim.analytic import compute_analytic
from projectile_sim.clock import ManualScheduler
from projectile_sim.collision import Target
from projectile_sim.integrator import simulate_fixed
from projectile_sim.params import SimParams
from projectile_sim.simulation import Simulation
from projectile_sim.validation import convergence_study, energy_drift
from projectile_sim.visualization import (
    TrajectoryRenderer, plot_method_comparison, plot_convergence,
    create_flight_animation,
)

FRAME_TIME = 1.0 / 60.0


def section(title):
    print(f"\n{'─'*60}")
    print(f"  {title}")
    print(f"{'─'*60}")


def run_live(params: SimParams, target: Target):
    """Play a Simulation to the end with synthetic frame timestamps."""
    scheduler = ManualScheduler()
    sim = Simulation(lambda: params, target=target, request_tick=scheduler)
    sim.play()
    ticks = scheduler.run(start=0.0, frame_time=FRAME_TIME)
    return sim, ticks


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Projectile motion simulator runner.")
    parser.add_argument("--quick", action="store_true",
                        help="skip the GIF animation")
    parser.add_argument("--out", default="outputs",
                        help="output directory (default: outputs)")
    parser.add_argument("--v0", type=float, default=20.0, help="initial speed (m/s)")
    parser.add_argument("--angle", type=float, default=45.0, help="launch angle (deg)")
    parser.add_argument("--y0", type=float, default=0.0, help="launch height (m)")
    parser.add_argument("--g", type=float, default=9.8, help="gravity (m/s²)")
    parser.add_argument("--dt", type=float, default=0.01, help="physics step (s)")
    parser.add_argument("--verbose", action="store_true",
                        help="log simulation state transitions")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    start_time = time.time()
    out = args.out
    os.makedirs(out, exist_ok=True)

    params = SimParams(v0=args.v0, ang_deg=args.angle, y0=args.y0,
                       g=args.g, dt=args.dt).validate()

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 1: Analytic model
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 1: Analytic Model")
    a = compute_analytic(params)
    print(f"  v0={params.v0} m/s  θ={params.ang_deg}°  y0={params.y0} m  "
          f"g={params.g} m/s²  dt={params.dt} s")
    print(f"  v0x={a.v0x:.3f} m/s  v0y={a.v0y:.3f} m/s")
    print(f"  Flight time T = {a.T:.4f} s")
    print(f"  Range       R = {a.R:.4f} m")
    print(f"  Apex height H = {a.H:.4f} m")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 2: Live loop
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 2: Live Loop (60 Hz synthetic frames)")
    sim, ticks = run_live(params, Target())
    st = sim.state
    print(f"  Frames: {ticks}  |  t={st.t:.3f} s  x={st.pos[0]:.3f} m  "
          f"y={st.pos[1]:.3f} m")
    print(f"  Trail samples: {len(st.trail)}  |  hit={sim.hit}")

    renderer = TrajectoryRenderer()
    renderer.draw(params, st, sim.target, sim.hit)
    renderer.save(f'{out}/01_final_frame.png')
    print(f"  ✓ Saved: {out}/01_final_frame.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 3: Target on the landing point
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 3: Target Hit Scenario")
    sim_hit, _ = run_live(params, Target(x=a.R, y=0.0, r=0.5))
    print(f"  Target at ({a.R:.2f}, 0.00) r=0.5 m  →  hit={sim_hit.hit} "
          f"at t={sim_hit.state.t:.3f} s (analytic T={a.T:.3f} s)")
    renderer.draw(params, sim_hit.state, sim_hit.target, sim_hit.hit)
    renderer.save(f'{out}/02_target_hit.png')
    print(f"  ✓ Saved: {out}/02_target_hit.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 4: Semi-implicit vs explicit Euler
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 4: Semi-Implicit vs Explicit Euler")
    dt_test = 0.05  # Large timestep to show differences
    results = {m: simulate_fixed(params, method=m, dt=dt_test)
               for m in ('semi_implicit', 'explicit')}
    for method, res in results.items():
        drift = energy_drift(res)
        print(f"  {method:<14s} Range: {res.range_total:8.3f} m  "
              f"Max Alt: {res.max_altitude:7.3f} m  "
              f"ΔE_end: {drift[-1]:+.4f} J/kg")
    print(results['semi_implicit'].summary())
    fig_cmp = plot_method_comparison(results, save_path=f'{out}/03_method_comparison.png')
    plt.close(fig_cmp)
    print(f"  ✓ Saved: {out}/03_method_comparison.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 5: Convergence
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 5: Convergence Study")
    conv = convergence_study(params, verbose=True)
    fig_conv = plot_convergence(conv, save_path=f'{out}/04_convergence.png')
    plt.close(fig_conv)
    print(f"  ✓ Saved: {out}/04_convergence.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 6: Animation
    # ══════════════════════════════════════════════════════════════════════
    if not args.quick:
        section("PHASE 6: Flight Animation (GIF)")
        create_flight_animation(params, save_path=f'{out}/05_flight.gif')
    else:
        section("PHASE 6: Animation SKIPPED (--quick mode)")

    elapsed = time.time() - start_time
    section("COMPLETE")
    print(f"  All outputs saved to: {os.path.abspath(out)}/")
    print(f"  Total runtime: {elapsed:.1f} seconds")


if __name__ == "__main__":
    main()
