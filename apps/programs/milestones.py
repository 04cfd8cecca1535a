"""Milestone schedules per program type.

A milestone is a completed-session number at which a check-in survey is
expected. Once a participant reaches the completion threshold, the
end-of-program survey is due instead.
"""
from collections import namedtuple

GROW = "GROW"
SCALE = "SCALE"
EXEC = "EXEC"

PROGRAM_TYPES = (GROW, SCALE, EXEC)


class MilestoneSchedule(namedtuple("MilestoneSchedule", ["program_type", "milestones", "completion_threshold"])):
    """Ordered milestone session numbers plus the full-completion threshold."""

    __slots__ = ()

    def is_milestone(self, sequence_number):
        return sequence_number in self.milestones

    def is_complete(self, completed_count):
        return completed_count >= self.completion_threshold


SCHEDULES = {
    GROW: MilestoneSchedule(GROW, (1, 6), 6),
    SCALE: MilestoneSchedule(SCALE, (1, 3, 6, 12, 18, 24, 30, 36), 36),
}

# Anything without its own schedule gets SCALE's denser cadence.
DEFAULT_SCHEDULE = SCHEDULES[SCALE]


def parse_program_type(label):
    """Map a free-text program label to GROW, SCALE or EXEC.

    A label belongs to a type when it starts with the type name in any case
    ("GROW - Cohort 1", "GROW2", "grow_cohort_1", "EXEC Leaders") or carries
    it as a later word ("Acme GROW"). SCALE is checked first. Unrecognised
    labels are treated as SCALE.
    """
    if not label:
        return SCALE
    upper = str(label).strip().upper()
    for program_type in (SCALE, GROW, EXEC):
        if upper.startswith(program_type) or f" {program_type}" in upper:
            return program_type
    return SCALE


def get_schedule(program_type):
    """Return the MilestoneSchedule for a program type or raw label.

    Never fails: unknown types fall back to the SCALE schedule.
    """
    return SCHEDULES.get(parse_program_type(program_type), DEFAULT_SCHEDULE)
