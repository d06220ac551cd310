from dataclasses import dataclass, field
from typing import Dict, List

from xivcombat.catalog import CatalogEntry
from xivcombat.common import JobClass
from xivcombat.core import CombatActionOptions
from xivcombat.followup import FollowUpRule

from xivcombat.job import gunbreaker, role


@dataclass
class JobKit:
    """
    Everything needed to build a session for one job.

    Attributes:
        job: Job the kit belongs to
        catalog: Catalog rows of every action in the kit
        actions: Action definitions
        rules: Follow-up rules, in evaluation order
    """

    job: JobClass
    catalog: List[CatalogEntry] = field(default_factory=list)
    actions: List[CombatActionOptions] = field(default_factory=list)
    rules: List[FollowUpRule] = field(default_factory=list)


_JOB_KITS: Dict[JobClass, JobKit] = {}


def register_job_kit(kit: JobKit):
    """Register a kit, replacing any kit previously registered for the job."""
    _JOB_KITS[kit.job] = kit


def get_job_kit(job: JobClass) -> JobKit:
    """
    Get the registered kit of a job.

    Raises:
        KeyError: If no kit is registered for the job
    """
    kit = _JOB_KITS.get(job)
    if kit is None:
        raise KeyError(f"No job kit registered for {job!r}")
    return kit


register_job_kit(JobKit(
    job=JobClass.GUNBREAKER,
    catalog=role.COMMON_CATALOG + role.TANK_CATALOG + gunbreaker.CATALOG,
    actions=role.COMMON_ACTIONS + role.TANK_ACTIONS + gunbreaker.ACTIONS,
    rules=list(gunbreaker.FOLLOW_UP_RULES),
))
