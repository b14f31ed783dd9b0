"""
Implementation sequencing for selected mitigation actions.

Ready-set scheduler: each round schedules every remaining action whose
dependencies are already scheduled (or were never selected). When nothing
is ready but actions remain, the action dependencies form a cycle; the
first remaining action in selection order is forced into the schedule.
This guarantees termination but is a heuristic: a forced action may run
before one of its prerequisites. Callers are told via the
``mitigation_dependency_cycle_broken`` warning.
"""

import structlog

from constraint_engine.models.constraints import MitigationAction

logger = structlog.get_logger()


def schedule_actions(actions: list[MitigationAction]) -> list[str]:
    """
    Order action ids so dependencies come first where possible.

    Dependencies on actions outside ``actions`` are treated as satisfied.

    Args:
        actions: Selected mitigation actions, in selection order

    Returns:
        Action ids in implementation order
    """
    remaining: dict[str, MitigationAction] = {a.id: a for a in actions}
    ordered: list[str] = []

    while remaining:
        ready = [
            action_id
            for action_id, action in remaining.items()
            if not any(dep in remaining for dep in action.dependencies)
        ]

        if not ready:
            forced = next(iter(remaining))
            logger.warning(
                "mitigation_dependency_cycle_broken",
                forced_action_id=forced,
                blocked_action_ids=list(remaining),
            )
            ready = [forced]

        for action_id in ready:
            ordered.append(action_id)
            del remaining[action_id]

    return ordered
