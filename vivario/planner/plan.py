"""
Plan generation.

Daily plan: one weighted module per top domain until the intensity quota
(1..3) is met.

Weekly plan: 7 days x 3 slots. Slot preferences:
    Matin  stabilizer (respiration / corps)
    Midi   main module (>= 4 minutes)
    Soir   micro module (micro tag or <= 3 minutes)
No module is used twice until the filtered pool is exhausted.
"""

import logging
from datetime import date, timedelta
from typing import Callable, List, Optional, Sequence, Set

from vivario.profile.models import EnergyLevel, Profile
from vivario.selection import normalize_text, pick_weighted, stable_seed
from vivario.shared.hashing import canonicalize
from .adherence import plan_intensity
from .models import (
    Adherence,
    DailyPlan,
    Module,
    ModuleLibrary,
    PLAN_DAYS,
    PlanDay,
    PlanOptions,
    PlanSlot,
    PlanStep,
    SLOT_LABELS,
    WeeklyPlan,
)

logger = logging.getLogger(__name__)

DAILY_TOP_DOMAINS = 5
LOW_ENERGY_MAX_MINUTES = 6
MIN_PROFILE_POOL = 6
MAX_INSTRUCTION_STEPS = 7

THEME_EXTRAS = {
    "travail": ["stress"],
    "finances": ["stress"],
    "sante": ["anxiete"],
    "multiple": ["stress"],
}

STABILIZER_TAGS = ("respiration", "corps")


# =============================================================================
# Weights
# =============================================================================

def level_weight(module: Module) -> float:
    if module.level == "low":
        return 1.25
    if module.level == "mid":
        return 1.0
    return 0.85


def time_weight(module: Module) -> float:
    """Shorter modules come up more often."""
    return max(0.55, min(1.35, 8 / max(1, module.minutes)))


def plan_weight(module: Module) -> float:
    return level_weight(module) * time_weight(module) * module.weight


def module_weight(module: Module) -> float:
    return module.weight or 1.0


# =============================================================================
# Daily plan
# =============================================================================

def pick_daily_modules(
    profile: Profile,
    library: ModuleLibrary,
    adherence: Adherence,
    seed,
) -> List[Module]:
    """
    Modules for today.

    For each top domain (up to 5): restrict to <= 6 minutes on low energy,
    draw one unused module weighted by module.weight. Stops once the
    intensity quota is met; falls back to the first core module.
    """
    intensity = plan_intensity(profile.energy, adherence.adherence)
    low = profile.energy == EnergyLevel.LOW

    out: List[Module] = []
    i = 0
    for domain in profile.top_domains(DAILY_TOP_DOMAINS):
        modules = library.by_domain(domain)
        if not modules:
            continue

        short = [m for m in modules if m.minutes <= LOW_ENERGY_MAX_MINUTES] if low else modules
        pool = short or modules
        chosen = {m.id for m in out}
        unused = [m for m in pool if m.id not in chosen]

        picked = pick_weighted(unused, stable_seed(str(seed), domain, i), weight=module_weight)
        if picked is not None:
            out.append(picked)

        i += 1
        if len(out) >= intensity:
            break

    if not out and library.core:
        out.append(library.core[0])

    return out


def _frame(energy: EnergyLevel) -> str:
    if energy == EnergyLevel.LOW:
        return "Plan court (au minimum viable)"
    if energy == EnergyLevel.HIGH:
        return "Plan progressif (avec une étape en plus)"
    return "Plan stable (simple et régulier)"


def build_daily_plan(
    profile: Profile,
    library: ModuleLibrary,
    adherence: Adherence,
    seed,
) -> DailyPlan:
    modules = pick_daily_modules(profile, library, adherence, seed)
    intro = (
        f"Voici ton **plan du jour**. Il est calibré sur ton énergie ({profile.energy.value}) "
        f"et ton rythme récent (adhérence estimée {adherence.adherence * 100:.0f}%)."
    )
    if adherence.streak >= 3:
        outro = (
            f"Tu as une bonne continuité ({adherence.streak} jours). "
            "On garde la trajectoire : petit, régulier, efficace."
        )
    else:
        outro = "Objectif : faire **1 chose** vraiment. Le reste est optionnel."

    steps = [
        PlanStep(
            order=idx + 1,
            id=m.id,
            title=m.title,
            minutes=m.minutes,
            when=m.when or "Aujourd’hui",
            steps=m.instructions[:MAX_INSTRUCTION_STEPS],
            tags=list(m.tags),
        )
        for idx, m in enumerate(modules)
    ]
    return DailyPlan(
        title=_frame(profile.energy),
        intro=intro,
        steps=steps,
        outro=outro,
        intensity=plan_intensity(profile.energy, adherence.adherence),
        adherence=adherence.adherence,
        streak=adherence.streak,
    )


# =============================================================================
# Weekly plan
# =============================================================================

def profile_themes(profile: Profile) -> Set[str]:
    themes: Set[str] = set()
    for t in profile.themes:
        themes.add(t)
        themes.update(THEME_EXTRAS.get(t, []))
    return themes


def filter_modules_for_profile(modules: Sequence[Module], profile: Profile) -> List[Module]:
    """
    Modules matching the profile's themes.

    Fewer than 6 matches: fall back to respiration / micro modules, then to
    everything.
    """
    themes = profile_themes(profile)
    matched = [m for m in modules if themes.intersection(m.themes)]
    if len(matched) >= MIN_PROFILE_POOL:
        return matched
    fallback = [m for m in modules if m.has_tag("respiration", "micro")]
    return fallback or list(modules)


def _is_stabilizer(m: Module) -> bool:
    return m.has_tag(*STABILIZER_TAGS)


def _is_micro(m: Module) -> bool:
    return m.has_tag("micro") or m.minutes <= 3


def _is_main(m: Module) -> bool:
    return m.minutes >= 4


class _DayPicker:
    """Draws modules for one day while tracking plan-wide usage."""

    def __init__(self, pool: List[Module], used: Set[str], day_seed: int):
        self.pool = pool
        self.used = used
        self.day_seed = day_seed
        self.draws = 0
        self.today: List[str] = []

    def pick(self, predicate: Optional[Callable[[Module], bool]] = None) -> Optional[Module]:
        candidates = [
            m for m in self.pool
            if m.id not in self.used and (predicate is None or predicate(m))
        ]
        module = pick_weighted(candidates, stable_seed(self.day_seed, self.draws), weight=plan_weight)
        self.draws += 1
        if module is not None:
            self.used.add(module.id)
        return module

    def shortest(self) -> Optional[Module]:
        """Shortest unused module, or any module not yet placed today once the pool is spent."""
        unused = [m for m in self.pool if m.id not in self.used]
        candidates = unused or [m for m in self.pool if m.id not in self.today]
        if not candidates:
            return None
        module = min(candidates, key=lambda m: (m.minutes, m.id))
        self.used.add(module.id)
        return module


def _slot(label: str, m: Module) -> PlanSlot:
    return PlanSlot(
        label=label,
        module_id=m.id,
        title=m.title,
        minutes=m.minutes,
        goal=m.goal,
        instructions=list(m.instructions),
    )


def build_plan(
    profile: Profile,
    library,
    options: Optional[PlanOptions] = None,
) -> WeeklyPlan:
    """
    7-day, 3-slot plan.

    Args:
        profile: built profile
        library: ModuleLibrary or a plain list of Modules
        options: start date, user id, salt, module ids to avoid

    Returns:
        WeeklyPlan
    """
    options = options or PlanOptions()
    modules = library.modules if isinstance(library, ModuleLibrary) else list(library)
    start = options.start_date or date.today()

    seed_base = stable_seed(canonicalize(profile.snapshot()))
    seed = stable_seed(seed_base, options.user_id, start.isoformat(), options.salt)

    pool = filter_modules_for_profile(modules, profile)
    used: Set[str] = set(options.used_module_ids)

    days: List[PlanDay] = []
    for d in range(PLAN_DAYS):
        picker = _DayPicker(pool, used, stable_seed(seed, d))

        stabilizer = picker.pick(_is_stabilizer)
        micro = picker.pick(_is_micro)
        main = picker.pick(_is_main)

        slots: List[PlanSlot] = []
        for label, prefs in zip(SLOT_LABELS, (
            (stabilizer, micro, main),
            (main, stabilizer, micro),
            (micro, stabilizer, main),
        )):
            m = next((x for x in prefs if x is not None and x.id not in picker.today), None)
            if m is None:
                m = picker.pick()
            if m is None:
                m = picker.shortest()
            if m is None:
                continue
            picker.today.append(m.id)
            slots.append(_slot(label, m))

        days.append(PlanDay(
            day_index=d,
            date=start + timedelta(days=d),
            slots=slots,
            signature=normalize_text("|".join(s.module_id for s in slots)),
        ))

    plan = WeeklyPlan(start_date=start, used_module_ids=sorted(used), days=days)
    logger.info(f"Weekly plan from {start.isoformat()}: {len(set(plan.module_ids()))} distinct modules")
    return plan
