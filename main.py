"""
Example script demonstrating a Gunbreaker opener.

This script sets up a Gunbreaker session, plays a scripted opener on it,
prints the resulting timeline and plots the cartridge gauge and cooldown
usage recovered from the session's event history.
"""

import argparse
import logging

import matplotlib.pyplot as plt
import numpy as np

from xivcombat.common import ActionID, CharacterStats, JobClass, ResourceType, format_ms
from xivcombat.events import CooldownExtended, CooldownStarted, ResourceSet
from xivcombat.rotation import Rotation, RotationRunner
from xivcombat.session import CombatSession, create_session

SECS = 1000

OPENER = [
    ActionID.KEEN_EDGE,
    ActionID.NO_MERCY,
    ActionID.BLOODFEST,
    ActionID.GNASHING_FANG,
    ActionID.CONTINUATION,
    ActionID.BOW_SHOCK,
    ActionID.DOUBLE_DOWN,
    ActionID.DANGER_ZONE,
    ActionID.ROUGH_DIVIDE,
    ActionID.GNASHING_FANG,
    ActionID.CONTINUATION,
    ActionID.ROUGH_DIVIDE,
    ActionID.GNASHING_FANG,
    ActionID.CONTINUATION,
    ActionID.SONIC_BREAK,
    ActionID.BURST_STRIKE,
    ActionID.CONTINUATION,
    ActionID.BRUTAL_SHELL,
    ActionID.SOLID_BARREL,
]


def build_opener() -> Rotation:
    rotation = Rotation(name="Gunbreaker Opener")
    for action_id in OPENER:
        rotation.add_action(action_id)
    return rotation


def cartridge_series(session: CombatSession, time_limit: int):
    """
    Extract the cartridge gauge as a step function from the event history.

    Returns:
        tuple: numpy arrays of times in seconds and gauge values
    """
    times = [0]
    values = [0]
    for time, event in session.store.history:
        if isinstance(event, ResourceSet) and event.resource == ResourceType.CARTRIDGE:
            times.append(time)
            values.append(event.amount)
    times.append(time_limit)
    values.append(values[-1])

    # events carry the requested amount, the store clamps it
    cap = session.store.resource_cap(ResourceType.CARTRIDGE)
    return np.array(times) / SECS, np.clip(np.array(values), 0, cap)


def cooldown_uses(session: CombatSession):
    """
    Group the times each cooldown group was started or extended.

    Returns:
        Dict[int, np.ndarray]: Use times in seconds by cooldown group
    """
    uses = {}
    for time, event in session.store.history:
        if isinstance(event, (CooldownStarted, CooldownExtended)) and event.duration > 0:
            uses.setdefault(event.group, []).append(time)

    return {group: np.array(times) / SECS for group, times in sorted(uses.items())}


def plot_timeline(session: CombatSession, time_limit: int, title="Gunbreaker Opener"):
    """
    Plot the cartridge gauge and the cooldown usage of a finished run.

    Args:
        session: Session the rotation was played on
        time_limit: End of the plotted window in milliseconds
        title: Title for the figure
    """
    times, cartridges = cartridge_series(session, time_limit)
    uses = cooldown_uses(session)

    fig, (ax_gauge, ax_uses) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

    ax_gauge.step(times, cartridges, where="post", color="b", label="cartridges")
    ax_gauge.set_ylabel("Cartridges")
    ax_gauge.set_ylim(-0.2, session.store.resource_cap(ResourceType.CARTRIDGE) + 0.2)
    ax_gauge.grid(True, linestyle="--", alpha=0.7)
    ax_gauge.legend()

    ax_uses.eventplot(list(uses.values()), colors="r", lineoffsets=np.arange(len(uses)))
    ax_uses.set_yticks(np.arange(len(uses)))
    ax_uses.set_yticklabels([str(group) for group in uses])
    ax_uses.set_ylabel("Cooldown group")
    ax_uses.set_xlabel("Time (seconds)")
    ax_uses.grid(True, linestyle="--", alpha=0.7)

    fig.suptitle(title)

    plt.savefig("opener_timeline.png", dpi=300, bbox_inches="tight")
    plt.show()


def run_gunbreaker_opener(time_limit: int, skill_speed=None, plot=True):
    """
    Run the scripted Gunbreaker opener.

    Args:
        time_limit: Time limit for the simulation in milliseconds
        skill_speed: Skill speed stat, defaults to the level's base value
        plot: Whether to plot the timeline

    Returns:
        CombatSession: The session after the run
    """
    stats = CharacterStats(job=JobClass.GUNBREAKER, skill_speed=skill_speed)
    session = create_session(JobClass.GUNBREAKER, stats=stats)

    rotation = build_opener()
    timeline = RotationRunner(session, rotation).run(time_limit=time_limit)

    print(f"{rotation.name} ({len(timeline)}/{len(rotation)} steps):")
    for i, entry in enumerate(timeline):
        print(f"[{i:03d}] {entry}")

    skipped = sum(1 for entry in timeline if not entry.executed)
    print(f"\nFinished at {format_ms(session.current_time)}, {skipped} skipped")
    print(f"Cartridges left: {session.store.resource(ResourceType.CARTRIDGE)}")
    print("Active buffs:", ", ".join(s.status_id.name for s in session.store.active_buffs()))

    if plot:
        plot_timeline(session, time_limit, title=f"{rotation.name} ({format_ms(time_limit)})")

    return session


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Simulate a Gunbreaker opener")
    parser.add_argument("--time-limit", type=int, default=30 * SECS, help="time limit in ms")
    parser.add_argument("--skill-speed", type=float, default=None)
    parser.add_argument("--no-plot", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    run_gunbreaker_opener(
        time_limit=args.time_limit,
        skill_speed=args.skill_speed,
        plot=not args.no_plot,
    )
