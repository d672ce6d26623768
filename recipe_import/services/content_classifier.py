"""
Lexical heuristics for classifying lines of recipe text.

Every heuristic is a named ``Rule`` so it can be tested on its own; the
classifier functions only combine rule results. All tables are built once at
import time and never mutated.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Pattern, Tuple

FRACTIONS = "½¼¾⅓⅔⅛⅜⅝⅞"

# Units that follow a quantity ("2 cups", "½ tsp")
_QUANTITY_UNITS = (
    r"cups?|tablespoons?|teaspoons?|tbsps?|tsps?|oz|ounces?|pounds?|lbs?|grams?|g|kg|ml|"
    r"liters?|litres?|l|inch|inches|cloves?|slices?|pieces?|cans?|jars?|bunch(?:es)?|"
    r"stalks?|heads?|sprigs?|pinch(?:es)?|dash(?:es)?|sticks?|packages?"
)
# Units that can open a line when the number wrapped onto the previous one
_LEADING_UNITS = (
    r"cups?|tablespoons?|teaspoons?|tbsps?|tsps?|oz|ounces?|pounds?|lbs?|grams?|g|ml|"
    r"cloves?|slices?|pieces?|cans?|jars?"
)
_FOOD_NOUNS = (
    r"chicken|beef|pork|lamb|turkey|fish|salmon|shrimp|egg|milk|cream|cheese|butter|oil|olive|"
    r"flour|sugar|salt|pepper|onion|garlic|tomato|potato|rice|pasta|noodle|bread|lemon|lime|"
    r"cilantro|parsley|basil|oregano|thyme|rosemary|cumin|paprika|cayenne|chili|jalapeño|bell|"
    r"carrot|celery|broccoli|spinach|lettuce|cabbage|mushroom|zucchini|squash|corn|bean|pea|"
    r"chickpea|lentil|avocado|cucumber|apple|banana|berry|berries|orange|ginger|soy|vinegar|"
    r"wine|broth|stock|honey|maple|vanilla|cinnamon|nutmeg|cherry|yogurt|tofu|jarred|canned|"
    r"drained|rinsed"
)
# Stems take an optional inflection so "baking", "stirred" and "combined" count
_COOKING_VERBS = (
    r"preheat|heat|cook|bak|boil|simmer|fry|fri|saut[eé]|stir|stirr|mix|combin|add|remov|"
    r"plac|transfer|transferr|flip|flipp|season|serv|whisk|pour|fold|knead|roast|grill|broil|"
    r"blend|beat|melt|drain|bring|reduc|chop|chopp|toss|spread|sprinkl|garnish|marinat|"
    r"refrigerat|cover"
)
_VERB_SUFFIX = r"(?:e|es|ed|d|s|ing)?"
_EQUIPMENT = (
    r"oven|skillet|pan|saucepan|pot|dutch oven|baking sheet|sheet pan|baking dish|grill|"
    r"microwave|bowl|blender|food processor|slow cooker|wok"
)
# Verbs that open a real step; used by misclassification recovery
_LEADING_STEP_VERBS = (
    r"preheat|heat|cook|bake|boil|simmer|fry|saute|sauté|stir|mix|combine|add|remove|place|"
    r"transfer|turn|flip|season|serve|let|allow|cover|uncover|drain|rinse|set|arrange|spread|"
    r"brush|drizzle|sprinkle|garnish|refrigerate|marinate|rest|cool|warm|whisk|pour|fold"
)


@dataclass(frozen=True)
class Rule:
    """A named lexical signal."""

    name: str
    pattern: Pattern[str]

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def _rule(name: str, pattern: str, flags: int = re.IGNORECASE) -> Rule:
    return Rule(name, re.compile(pattern, flags))


INGREDIENT_RULES: Tuple[Rule, ...] = (
    _rule("quantity_unit", rf"(?:\d+|[{FRACTIONS}])\s*(?:{_QUANTITY_UNITS})\b"),
    _rule(
        "unit_or_prep_word",
        r"\b(?:cups?|teaspoons?|tablespoons?|ounces?|pounds?|sliced?|diced?|chopped|minced?|"
        r"fresh|dried|whole|large|medium|small|thin|thick|boneless|skinless|shredded|grated)\b",
    ),
    _rule("food_noun", rf"\b(?:{_FOOD_NOUNS})"),
    _rule("leading_fraction", rf"^[{FRACTIONS}]"),
    _rule("leading_unit", rf"^(?:{_LEADING_UNITS})\s"),
)

INSTRUCTION_RULES: Tuple[Rule, ...] = (
    _rule("cooking_verb", rf"\b(?:{_COOKING_VERBS}){_VERB_SUFFIX}\b"),
    _rule(
        "temperature_or_time",
        r"\b\d+\s*°\s*[fc]?|\b\d+\s*(?:degrees?|[fc])\b|"
        r"\b\d+\s*(?:minutes?|mins?|hours?|hrs?|seconds?|secs?)\b",
    ),
    _rule("equipment", rf"\b(?:{_EQUIPMENT})s?\b"),
)

# A line mentioning any of these is never treated as a cooking step
INSTRUCTION_BLOCKERS: Tuple[Rule, ...] = (
    _rule("footer_vocabulary", r"\b(?:rate|rating|comment|review|subscribe|newsletter|business|website)"),
)

NOISE_RULES: Tuple[Rule, ...] = (
    _rule(
        "cta_with_domain_noun",
        r"\b(?:save|shop|get|view|see|click|subscribe|sign\s*up|log\s*in|create|download)\b"
        r".*\b(?:recipes?|ingredients?|meals?|plans?|lists?|shopping)",
    ),
    _rule("rating_prompt", r"\b(?:rating|comment|review|feedback)\b.*\b(?:let|know|help|business|thrive)"),
    _rule("last_step_prompt", r"\blast\s*step\b.*\b(?:rating|comment|review)"),
    _rule("leave_review_prompt", r"\b(?:leave|please)\b.*\b(?:rating|comment|review)"),
    _rule(
        "marketing_phrase",
        r"\b(?:free\s+(?:trial|download|shipping|e-?book|guide|printable|access)|"
        r"high[\s-]quality\s+(?:content|recipes?)|continue\s+providing)\b",
    ),
    _rule("business_phrase", r"\b(?:business|thrive)\b"),
    _rule("meal_plan_promo", r"\bmeal\s*plans?\b.*\b(?:and\s+more|create)"),
    _rule("shopping_list_promo", r"\bshopping\s+lists?\b"),
    _rule("spaced_letters", r"^\s*(?:[a-z]\s+){2,}[a-z]\b"),
    _rule(
        "social_newsletter",
        r"\b(?:newsletter|social\s+media|follow\s+(?:us|me|along)|share\s+(?:this|on)|"
        r"pin\s+(?:it|this)|tweet|instagram|facebook|pinterest)\b",
    ),
    _rule("legal_footer", r"\b(?:privacy|policy|terms|conditions|copyright|all rights reserved)\b"),
    _rule("navigation_word", r"^\s*(?:home|about|contact|blog|search)\s*$"),
)

# Stronger markers used only when repairing ingredient lines that landed under
# the instructions header (PDF column interleaving)
STRONG_INGREDIENT_RULES: Tuple[Rule, ...] = (
    _rule(
        "leading_quantity_unit",
        rf"^(?:\d+[\s/]*\d*|[{FRACTIONS}])\s*(?:{_LEADING_UNITS})\b",
    ),
    _rule("leading_bare_unit", r"^(?:cups?|tablespoons?|teaspoons?|tbsp|tsp|oz|ounces?|pounds?|lbs?)\s+\w"),
    _rule("from_parenthetical", r"\(from\s+\d+\s+\w+"),
    _rule("trailing_prep", r",\s*(?:sliced|diced|chopped|minced|quartered|halved)\b"),
    _rule("cut_descriptor", rf"(?:sliced|cut)\s+[{FRACTIONS}\d]+\s*inch"),
)

STRONG_INSTRUCTION_RULES: Tuple[Rule, ...] = (
    _rule("leading_cooking_verb", rf"^(?:{_LEADING_STEP_VERBS})\b"),
    _rule("until_clause", r"\buntil\b"),
    _rule(
        "time_or_temperature_token",
        r"\b(?:\d+\s*°\s*[fc]?|\d+\s*(?:minutes?|mins?|hours?|hrs?|seconds?))",
    ),
    _rule("equipment_noun", r"\b(?:oven|pan|skillet|pot|bowl|baking sheet|sheet pan|grill|microwave)\b"),
)


def matching_rules(line: str, rules: Tuple[Rule, ...]) -> List[str]:
    """Names of the rules that fire on ``line``."""
    return [rule.name for rule in rules if rule.matches(line)]


def _any(line: str, rules: Tuple[Rule, ...]) -> bool:
    return any(rule.matches(line) for rule in rules)


def is_ingredient_like(line: str) -> bool:
    """Does this line read like an ingredient (quantity, unit, or food word)?"""
    if len(line.strip()) < 3:
        return False
    return _any(line.lower(), INGREDIENT_RULES)


def is_instruction_like(line: str) -> bool:
    """Does this line read like a cooking step?"""
    if len(line.strip()) < 10:
        return False
    lower = line.lower()
    if _any(lower, INSTRUCTION_BLOCKERS):
        return False
    return _any(lower, INSTRUCTION_RULES)


def is_noise(line: str) -> bool:
    """Is this line website chrome (CTA, rating prompt, footer, social)?"""
    return _any(line.lower(), NOISE_RULES)


def has_strong_ingredient_marker(line: str) -> bool:
    return _any(line, STRONG_INGREDIENT_RULES)


def has_strong_instruction_marker(line: str) -> bool:
    return _any(line, STRONG_INSTRUCTION_RULES)
