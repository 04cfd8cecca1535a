"""Resolve a participant's raw program reference to a program type.

Participants carry whatever the upstream sync wrote: a program uuid, a
program name, or a decorated type label. Lookups are tried in order and
the first usable answer wins; database trouble falls through to label
parsing, so this never raises.
"""
import logging
import re

from django.db import DatabaseError

from .milestones import PROGRAM_TYPES, SCALE, parse_program_type

logger = logging.getLogger(__name__)

UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def resolve_program_type(raw_program):
    """Return GROW, SCALE or EXEC for a raw program reference."""
    if not raw_program or not str(raw_program).strip():
        return SCALE

    label = str(raw_program).strip()
    if label.upper() in PROGRAM_TYPES:
        return label.upper()

    try:
        program_type = _lookup_program_type(label)
    except DatabaseError:
        logger.exception("Program lookup failed for %r; inferring type from label", label)
        program_type = None

    if program_type in PROGRAM_TYPES:
        return program_type
    return parse_program_type(label)


def _lookup_program_type(label):
    from .models import Program

    if UUID_RE.match(label):
        program_type = (
            Program.objects.filter(uuid=label)
            .values_list("program_type", flat=True)
            .first()
        )
        if program_type:
            return program_type

    return (
        Program.objects.filter(name__icontains=label)
        .order_by("pk")
        .values_list("program_type", flat=True)
        .first()
    )
