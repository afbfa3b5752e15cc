"""Purchase rules as data.

Each :class:`PurchaseRule` is one block of the per-customer decision tree:
a primary category bought with some probability, optionally followed by a
secondary category whose probability depends on whether the primary was
bought. Adding or removing a rule is a change to :data:`DEFAULT_RULES`,
not to the engine's control flow.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from retail_sales_sim.foundation.catalog import SPECIAL_CATEGORIES
from retail_sales_sim.synthetic.keyed_random import RuleId


def _check_probability(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be within [0, 1]: {value}")


def _as_probability(rule_name: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Override for {rule_name!r} is not a number: {value!r}") from exc


@dataclass(frozen=True)
class RuleStep:
    """Unconditional purchase decision for one category.

    Attributes
    ----------
    category:
        Catalog category the pick is drawn from.
    probability:
        Probability that the customer buys from the category.
    decision_rule:
        Rule id keying the Bernoulli draw.
    pick_rule:
        Rule id keying the uniform SKU pick within the category.
    """

    category: str
    probability: float
    decision_rule: RuleId
    pick_rule: RuleId

    def __post_init__(self) -> None:
        _check_probability(f"{self.category} probability", self.probability)


@dataclass(frozen=True)
class ConditionalStep:
    """Purchase decision whose probability depends on the primary outcome."""

    category: str
    given_probability: float
    without_probability: float
    given_rule: RuleId
    without_rule: RuleId
    pick_rule: RuleId

    def __post_init__(self) -> None:
        _check_probability(f"{self.category} given probability", self.given_probability)
        _check_probability(
            f"{self.category} without probability", self.without_probability
        )


@dataclass(frozen=True)
class PurchaseRule:
    """One block of the decision tree: a primary step and an optional pair."""

    name: str
    primary: RuleStep
    secondary: ConditionalStep | None = None

    def marginal_probabilities(self) -> dict[str, float]:
        """Unconditional purchase probability of each category in the block."""
        p = self.primary.probability
        result = {self.primary.category: p}
        if self.secondary is not None:
            result[self.secondary.category] = (
                p * self.secondary.given_probability
                + (1.0 - p) * self.secondary.without_probability
            )
        return result

    def with_probabilities(
        self,
        primary: float,
        given: float | None = None,
        without: float | None = None,
    ) -> PurchaseRule:
        """Return a copy of the rule with overridden probabilities."""
        step = RuleStep(
            self.primary.category,
            primary,
            self.primary.decision_rule,
            self.primary.pick_rule,
        )
        secondary = self.secondary
        if secondary is not None:
            secondary = ConditionalStep(
                secondary.category,
                secondary.given_probability if given is None else given,
                secondary.without_probability if without is None else without,
                secondary.given_rule,
                secondary.without_rule,
                secondary.pick_rule,
            )
        return PurchaseRule(self.name, step, secondary)


MILK_CEREAL = PurchaseRule(
    name="milk_cereal",
    primary=RuleStep("Milk", 0.70, RuleId.MILK, RuleId.MILK_PICK),
    secondary=ConditionalStep(
        "Cereal",
        0.50,
        0.05,
        RuleId.CEREAL_GIVEN_MILK,
        RuleId.CEREAL_WITHOUT_MILK,
        RuleId.CEREAL_PICK,
    ),
)

BABY_FOOD_DIAPERS = PurchaseRule(
    name="baby_food_diapers",
    primary=RuleStep("Baby Food", 0.20, RuleId.BABY_FOOD, RuleId.BABY_PICK),
    secondary=ConditionalStep(
        "Diapers",
        0.80,
        0.01,
        RuleId.DIAPERS_GIVEN_BABY,
        RuleId.DIAPERS_WITHOUT_BABY,
        RuleId.DIAPERS_PICK,
    ),
)

BREAD = PurchaseRule(
    name="bread",
    primary=RuleStep("Bread", 0.50, RuleId.BREAD, RuleId.BREAD_PICK),
)

PEANUT_BUTTER_JAM = PurchaseRule(
    name="peanut_butter_jam",
    primary=RuleStep("Peanut Butter", 0.10, RuleId.PEANUT_BUTTER, RuleId.PB_PICK),
    secondary=ConditionalStep(
        "Jelly/Jam",
        0.90,
        0.05,
        RuleId.JAM_GIVEN_PB,
        RuleId.JAM_WITHOUT_PB,
        RuleId.JAM_PICK,
    ),
)

# Evaluation order matters: later blocks are skipped once the quota is met.
DEFAULT_RULES: tuple[PurchaseRule, ...] = (
    MILK_CEREAL,
    BABY_FOOD_DIAPERS,
    BREAD,
    PEANUT_BUTTER_JAM,
)


def category_probabilities(rules: Sequence[PurchaseRule]) -> dict[str, float]:
    """Marginal purchase probability per special category for ``rules``.

    Returned in :data:`SPECIAL_CATEGORIES` order; categories no rule
    mentions are omitted.
    """
    merged: dict[str, float] = {}
    for rule in rules:
        merged.update(rule.marginal_probabilities())
    ordered = {c: merged[c] for c in SPECIAL_CATEGORIES if c in merged}
    ordered.update({c: p for c, p in merged.items() if c not in ordered})
    return ordered


def override_probabilities(
    rules: Sequence[PurchaseRule],
    overrides: Mapping[str, float | Sequence[float]],
) -> tuple[PurchaseRule, ...]:
    """Return ``rules`` with per-rule probability overrides applied.

    ``overrides`` maps a rule name to either the primary probability or a
    ``(primary, given, without)`` triple.

    Raises
    ------
    ValueError
        If a name matches no rule or a sequence is not a triple.
    """
    unknown = sorted(set(overrides) - {rule.name for rule in rules})
    if unknown:
        raise ValueError("Unknown rule names", {"names": unknown})

    result = []
    for rule in rules:
        value = overrides.get(rule.name)
        if value is None:
            result.append(rule)
        elif isinstance(value, (list, tuple)):
            if len(value) != 3:
                raise ValueError(
                    f"Override for {rule.name!r} must be a probability or a "
                    f"(primary, given, without) triple: {value!r}"
                )
            primary, given, without = (_as_probability(rule.name, v) for v in value)
            result.append(rule.with_probabilities(primary, given, without))
        else:
            result.append(rule.with_probabilities(_as_probability(rule.name, value)))
    return tuple(result)
