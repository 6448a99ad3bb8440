import itertools
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from config import CONFIG
from menu_parser import MenuItem, filter_by_diet, parse_menu

logger = logging.getLogger(__name__)

# ====================================================================

DIET_OPTIONS = CONFIG["diet_options"]


@dataclass
class ComboTotals:
    names: List[str] = field(default_factory=list)
    price: float = 0.0
    calories: float = 0.0
    protein: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    sat_fat: float = 0.0
    sodium: float = 0.0
    tags: List[str] = field(default_factory=list)


@dataclass
class Targets:
    price_target: float
    calorie_target: float


@dataclass
class RankRequest:
    calorie_goal: float
    hunger_level: int
    budget: float
    max_combo_size: int = 2
    diet: str = "any"


@dataclass
class ScoredCombo:
    items: Tuple[MenuItem, ...]
    totals: ComboTotals
    score: float

    @property
    def key(self) -> Tuple[str, ...]:
        """Order-independent identity of the member set."""
        return tuple(sorted(self.totals.names))


@dataclass
class Recommendation:
    items: List[MenuItem]
    filtered: List[MenuItem]
    targets: Optional[Targets]
    combos: List[ScoredCombo]


def combo_sum(items: Sequence[MenuItem]) -> ComboTotals:
    totals = ComboTotals()
    for it in items:
        totals.names.append(it.name)
        totals.price += it.price
        totals.calories += it.calories
        totals.protein += it.protein
        totals.fiber += it.fiber
        totals.sugar += it.sugar
        totals.sat_fat += it.sat_fat
        totals.sodium += it.sodium
        for t in it.tags:
            if t not in totals.tags:
                totals.tags.append(t)
    return totals

def _capped(value: float, term: str) -> float:
    cap, weight = CONFIG[term]
    return min(value / cap, 1) * weight

def health_score(totals: ComboTotals, targets: Targets) -> float:
    """
    Desirability of a combo on a 0..100 scale. Protein and fiber add points,
    sugar, saturated fat, sodium, distance from the calorie target and
    spending over budget take them away. Every term is capped on its own.
    """
    protein_score = _capped(totals.protein, "protein_reward")
    fiber_score = _capped(totals.fiber, "fiber_reward")
    sugar_penalty = _capped(totals.sugar, "sugar_penalty")
    sat_fat_penalty = _capped(totals.sat_fat, "sat_fat_penalty")
    sodium_penalty = _capped(totals.sodium, "sodium_penalty")
    cal_penalty = _capped(abs(totals.calories - targets.calorie_target), "calorie_penalty")

    price_penalty = 0.0
    if totals.price > targets.price_target:
        over = (totals.price - targets.price_target) / max(targets.price_target, 1)
        price_penalty = min(over, 1) * CONFIG["price_penalty_weight"]

    score = (CONFIG["score_base"] + protein_score + fiber_score
             - sugar_penalty - sat_fat_penalty - sodium_penalty
             - cal_penalty - price_penalty)
    return max(0.0, min(100.0, score))

def calorie_target(calorie_goal: float, hunger_level: float) -> int:
    multiplier = (CONFIG["hunger_base_multiplier"]
                  + (hunger_level / CONFIG["hunger_max"]) * CONFIG["hunger_span_multiplier"])
    # half-up rounding, not banker's
    return math.floor(calorie_goal * multiplier + 0.5)

def build_targets(request: RankRequest) -> Targets:
    return Targets(
        price_target=request.budget,
        calorie_target=calorie_target(request.calorie_goal, request.hunger_level),
    )

def candidate_combos(items: List[MenuItem], max_combo_size: int):
    for it in items:
        yield (it,)
    if max_combo_size >= 2:
        yield from itertools.combinations(items, 2)

def rank_combos(items: List[MenuItem], request: RankRequest,
                top_n: Optional[int] = None) -> List[ScoredCombo]:
    """Score every single item and (optionally) every pair; keep the best distinct few."""
    if not items:
        return []
    top_n = CONFIG["top_n"] if top_n is None else top_n
    targets = build_targets(request)

    scored = []
    for combo in candidate_combos(items, request.max_combo_size):
        totals = combo_sum(combo)
        scored.append(ScoredCombo(items=combo, totals=totals, score=health_score(totals, targets)))
    scored.sort(key=lambda s: s.score, reverse=True)
    logger.debug("Scored %d candidate combo(s) against %s", len(scored), targets)

    picks: List[ScoredCombo] = []
    seen = set()
    for s in scored:
        if len(picks) == top_n:
            break
        if s.key in seen:
            continue
        seen.add(s.key)
        picks.append(s)
    return picks

# ---- Request handling ----

def _read_number(value: Any, default: float) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    n = pd.to_numeric(value, errors="coerce")
    return float(n) if np.isfinite(n) else default

def build_request(budget: Any = None, calorie_goal: Any = None, hunger_level: Any = None,
                  max_combo_size: Any = None, diet: Any = None) -> RankRequest:
    """Turn user-entered values into a RankRequest, falling back to defaults."""
    budget_n = max(_read_number(budget, CONFIG["default_budget"]), 0)
    goal = _read_number(calorie_goal, CONFIG["default_calorie_goal"]) or CONFIG["default_calorie_goal"]
    hunger = _read_number(hunger_level, CONFIG["default_hunger_level"])
    hunger = int(min(max(hunger, 0), CONFIG["hunger_max"]))
    size = _read_number(max_combo_size, CONFIG["default_max_combo_size"])
    size = int(size) if size in CONFIG["combo_sizes"] else CONFIG["default_max_combo_size"]
    diet_s = str(diet or "").strip().lower()
    if diet_s not in DIET_OPTIONS:
        diet_s = CONFIG["default_diet"]
    return RankRequest(calorie_goal=goal, hunger_level=hunger, budget=budget_n,
                       max_combo_size=size, diet=diet_s)

def recommend(text: str, request: Optional[RankRequest] = None, **inputs) -> Recommendation:
    """parse -> diet filter -> rank, recomputed from scratch on every call."""
    if request is None:
        request = build_request(**inputs)
    items = parse_menu(text)
    filtered = filter_by_diet(items, request.diet)
    combos = rank_combos(filtered, request)
    targets = build_targets(request) if filtered else None
    return Recommendation(items=items, filtered=filtered, targets=targets, combos=combos)

# ---- Output ----

def _fmt(n: float) -> str:
    return f"{n:g}"

def format_combos(combos: List[ScoredCombo]) -> str:
    if not combos:
        return "No valid items found. Check your menu format."
    parts = ["🥗 Top Healthy Combos"]
    for idx, pick in enumerate(combos, 1):
        t = pick.totals
        parts.append("")
        parts.append(f"Combo #{idx}  Score {pick.score:.0f}")
        for name in t.names:
            parts.append(f"  • {name}")
        parts.append(f"  Total Cost: ${t.price:.2f}  |  Calories: {_fmt(t.calories)} kcal")
        parts.append(f"  Protein: {_fmt(t.protein)} g  Fiber: {_fmt(t.fiber)} g  Sugar: {_fmt(t.sugar)} g")
        parts.append(f"  Sat Fat: {_fmt(t.sat_fat)} g  Sodium: {_fmt(t.sodium)} mg")
        if t.tags:
            parts.append(f"  Tags: {', '.join(t.tags)}")
    return "\n".join(parts)

def summarize(rec: Recommendation) -> Dict[str, Any]:
    """Plain dict view of a recommendation, e.g. for logging or JSON output."""
    return {
        "items": len(rec.items),
        "filtered": len(rec.filtered),
        "calorie_target": rec.targets.calorie_target if rec.targets else None,
        "price_target": rec.targets.price_target if rec.targets else None,
        "combos": [
            {"rank": i, "score": round(c.score, 2), "names": c.totals.names}
            for i, c in enumerate(rec.combos, 1)
        ],
    }
