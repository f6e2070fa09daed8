"""
Priority classification.

Cargo type → tier is a fixed table. Tiers order EMERGENCY > ESSENTIAL >
NORMAL > LOW; the top two are protected and are never halted by congestion.
"""

from django.db import models
from django.db.models import Case, IntegerField, Value, When

from portlink.exceptions import PriorityNotAuthorized


class PriorityTier(models.TextChoices):
    EMERGENCY = "EMERGENCY", "Emergency"
    ESSENTIAL = "ESSENTIAL", "Essential"
    NORMAL    = "NORMAL",    "Normal"
    LOW       = "LOW",       "Low"


class CargoType(models.TextChoices):
    MEDICAL        = "MEDICAL",        "Medical supplies"
    PERISHABLE     = "PERISHABLE",     "Perishable"
    HAZARDOUS      = "HAZARDOUS",      "Hazardous"
    TIME_SENSITIVE = "TIME_SENSITIVE", "Time sensitive"
    STANDARD       = "STANDARD",       "Standard"
    OTHER          = "OTHER",          "Other"
    BULK           = "BULK",           "Bulk"


CARGO_PRIORITY = {
    CargoType.MEDICAL:        PriorityTier.EMERGENCY,
    CargoType.PERISHABLE:     PriorityTier.EMERGENCY,
    CargoType.HAZARDOUS:      PriorityTier.EMERGENCY,
    CargoType.TIME_SENSITIVE: PriorityTier.ESSENTIAL,
    CargoType.STANDARD:       PriorityTier.NORMAL,
    CargoType.OTHER:          PriorityTier.NORMAL,
    CargoType.BULK:           PriorityTier.LOW,
}

PRIORITY_RANK = {
    PriorityTier.EMERGENCY: 4,
    PriorityTier.ESSENTIAL: 3,
    PriorityTier.NORMAL:    2,
    PriorityTier.LOW:       1,
}

PROTECTED_PRIORITIES = frozenset({PriorityTier.EMERGENCY, PriorityTier.ESSENTIAL})
HALTABLE_PRIORITIES  = frozenset({PriorityTier.NORMAL, PriorityTier.LOW})

# Published alongside the table on GET /api/priority-rules/
MAX_DELAY_MINUTES = {
    PriorityTier.EMERGENCY: 30,
    PriorityTier.ESSENTIAL: 120,
    PriorityTier.NORMAL:    480,
    PriorityTier.LOW:       1440,
}


def classify(cargo_type) -> str:
    """Map a cargo type to its tier. Unknown or missing cargo is NORMAL."""
    key = str(cargo_type or "").strip().upper()
    return CARGO_PRIORITY.get(key, PriorityTier.NORMAL).value


def is_protected(priority) -> bool:
    return priority in PROTECTED_PRIORITIES


def ensure_authorized(organization, priority):
    """Reject, never downgrade, a tier the organization may not request."""
    if organization is None:
        return
    if not organization.is_authorized_for(priority):
        raise PriorityNotAuthorized(priority, organization.authorized_priorities)


def priority_rank_expression(field="priority"):
    """SQL CASE yielding PRIORITY_RANK, for ordering querysets highest first."""
    return Case(
        *[When(**{field: tier.value}, then=Value(rank)) for tier, rank in PRIORITY_RANK.items()],
        default=Value(0),
        output_field=IntegerField(),
    )


def priority_rules():
    return [
        {
            "cargo_type":        cargo.value,
            "priority_level":    tier.value,
            "max_delay_minutes": MAX_DELAY_MINUTES[tier],
            "can_be_halted":     tier not in PROTECTED_PRIORITIES,
            "description":       cargo.label,
        }
        for cargo, tier in sorted(CARGO_PRIORITY.items(), key=lambda kv: -PRIORITY_RANK[kv[1]])
    ]
