"""
Vivario Diagnostic & Plan Generator

Turns domain scores into a labeled diagnostic, and check-in history plus
the module library into a daily plan and a 7-day, 3-slot schedule.

PRINCIPLE: safety first. Any urgency marker replaces the diagnostic with
a fixed safety message.

Version: vivario-pro-result-1.0
"""

from .models import (
    Adherence,
    CheckIn,
    DailyPlan,
    Diagnostic,
    DomainReading,
    Module,
    ModuleLibrary,
    PlanDay,
    PlanOptions,
    PlanSlot,
    PlanStep,
    ResultPayload,
    Severity,
    WeeklyPlan,
    SLOT_LABELS,
)
from .diagnostic import generate_diagnostic, severity_for, top_domains
from .adherence import compute_adherence, normalize_checkins, plan_intensity
from .plan import (
    build_daily_plan,
    build_plan,
    filter_modules_for_profile,
    pick_daily_modules,
    plan_weight,
)
from .result import build_result

__all__ = [
    "Adherence",
    "CheckIn",
    "DailyPlan",
    "Diagnostic",
    "DomainReading",
    "Module",
    "ModuleLibrary",
    "PlanDay",
    "PlanOptions",
    "PlanSlot",
    "PlanStep",
    "ResultPayload",
    "Severity",
    "WeeklyPlan",
    "SLOT_LABELS",
    "generate_diagnostic",
    "severity_for",
    "top_domains",
    "compute_adherence",
    "normalize_checkins",
    "plan_intensity",
    "build_daily_plan",
    "build_plan",
    "filter_modules_for_profile",
    "pick_daily_modules",
    "plan_weight",
    "build_result",
]
