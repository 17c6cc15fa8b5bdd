"""
Stage Trigger Engine for the MND Playbook

Maps ALSFRS-R answers to roadmap stage suggestions. Rules are declarative
dicts evaluated in table order; several rules may point at the same stage,
in which case the most severe matching rule wins while the stage keeps the
position of its first match. The result is sorted urgent-first.

Rule fields:
    stage        roadmap stage id the rule suggests
    alert_level  info | suggested | recommended | urgent
    message      text shown to the user
    triggered_by question ids (or "total_score") shown as the reason
    when         {key: condition} - every condition must hold
    when_any     [{key: condition}, ...] - at least one dict must fully hold
    when_change  {key: condition} - applied to (current - previous); never
                 holds without a previous answer set

A condition is an int (equality), a comparison string such as "<=2" or
">0", or a list of conditions that must all hold.
"""

import logging
import operator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .config import DISPLAY
from .errors import RuleConfigurationError
from .questionnaire_engine import AnswerSet
from .questionnaire_specs import QUESTION_KEYS
from .stage_specs import STAGE_IDS

logger = logging.getLogger(__name__)


class AlertLevel(str, Enum):
    INFO = "info"
    SUGGESTED = "suggested"
    RECOMMENDED = "recommended"
    URGENT = "urgent"


ALERT_PRIORITY = {
    AlertLevel.URGENT: 4,
    AlertLevel.RECOMMENDED: 3,
    AlertLevel.SUGGESTED: 2,
    AlertLevel.INFO: 1,
}

# Pseudo-key: sum of every value in the answer set
TOTAL_SCORE_KEY = "total_score"

# How rules read a question that has not been answered
MISSING_AS_ZERO = "zero"
MISSING_SKIP = "skip"
MISSING_POLICIES = (MISSING_AS_ZERO, MISSING_SKIP)

_COMPARATORS: Tuple[Tuple[str, Callable[[Any, Any], bool]], ...] = (
    (">=", operator.ge),
    ("<=", operator.le),
    (">", operator.gt),
    ("<", operator.lt),
    ("=", operator.eq),
)

TRIGGER_RULES: List[Dict[str, Any]] = [
    # Lower Limb Pathway
    {
        "stage": "L1",
        "when_any": [{"walking": 3}, {"climbing_stairs": 3}],
        "alert_level": "info",
        "message": "You've noted early walking changes. Learn about what to expect.",
        "triggered_by": ["walking", "climbing_stairs"],
    },
    {
        "stage": "L2",
        "when_any": [{"walking": 2}, {"climbing_stairs": 2}],
        "alert_level": "suggested",
        "message": "Walking aids may help maintain independence. View mobility aid options.",
        "triggered_by": ["walking", "climbing_stairs"],
    },
    {
        # The when_any clause is implied by the when clause; kept as written
        "stage": "L2",
        "when": {"walking": "<=3", "climbing_stairs": "<=3"},
        "when_any": [{"walking": "<4"}, {"climbing_stairs": "<4"}],
        "alert_level": "recommended",
        "message": "Multiple mobility changes detected. Consider OT assessment.",
        "triggered_by": ["walking", "climbing_stairs"],
    },
    {
        "stage": "L3",
        "when": {"climbing_stairs": 1},
        "alert_level": "recommended",
        "message": "Stairs are now very difficult. Consider stairlift or bedroom relocation.",
        "triggered_by": ["climbing_stairs"],
    },
    {
        "stage": "L3",
        "when": {"walking": ["<=2", ">0"], "climbing_stairs": ["<=2", ">0"]},
        "alert_level": "recommended",
        "message": "Mobility significantly affected. Home modification assessment recommended.",
        "triggered_by": ["walking", "climbing_stairs"],
    },
    {
        "stage": "L3",
        "when": {"turning_in_bed": "<=2"},
        "alert_level": "suggested",
        "message": "Bed mobility changing. Consider hospital bed or rails.",
        "triggered_by": ["turning_in_bed"],
    },
    {
        "stage": "L4",
        "when": {"walking": "<=1"},
        "alert_level": "recommended",
        "message": "Walking is no longer functional. Wheelchair assessment is timely.",
        "triggered_by": ["walking"],
    },
    {
        "stage": "L4",
        "when": {"walking": 0},
        "alert_level": "urgent",
        "message": "You've indicated no walking ability. Powered wheelchair options available.",
        "triggered_by": ["walking"],
    },

    # Bulbar Pathway
    {
        "stage": "B1",
        "when_any": [{"speech": 3}, {"salivation": 3}],
        "alert_level": "info",
        "message": "Speech or saliva changes noticed. Learn about what to expect.",
        "triggered_by": ["speech", "salivation"],
    },
    {
        "stage": "B2",
        "when": {"speech": 2},
        "alert_level": "urgent",
        "message": "Speech clarity declining. Speech therapy and voice banking recommended NOW.",
        "triggered_by": ["speech"],
    },
    {
        "stage": "B2",
        "when": {"speech": 3},
        "alert_level": "recommended",
        "message": "Voice banking works best while speech is still clear. Consider starting now.",
        "triggered_by": ["speech"],
    },
    {
        "stage": "B3",
        "when": {"speech": 1},
        "alert_level": "recommended",
        "message": "Speech is significantly affected. AAC device assessment recommended.",
        "triggered_by": ["speech"],
    },
    {
        "stage": "B3",
        "when": {"speech": 0},
        "alert_level": "urgent",
        "message": "Speech is no longer functional. AAC and eye-gaze options available.",
        "triggered_by": ["speech"],
    },
    {
        "stage": "B3",
        "when": {"handwriting": "<=1", "speech": "<=2"},
        "alert_level": "urgent",
        "message": "Both speech and writing affected. High-tech AAC assessment needed.",
        "triggered_by": ["speech", "handwriting"],
    },
    {
        "stage": "B4",
        "when": {"swallowing": 3},
        "alert_level": "info",
        "message": "Early swallowing changes. Dietitian review may help.",
        "triggered_by": ["swallowing"],
    },
    {
        "stage": "B4",
        "when": {"swallowing": 2},
        "alert_level": "recommended",
        "message": "Diet modifications needed. View texture-modified food resources.",
        "triggered_by": ["swallowing"],
    },
    {
        "stage": "B4",
        "when": {"swallowing": 1},
        "alert_level": "urgent",
        "message": "Significant swallowing difficulty. PEG discussion recommended with care team.",
        "triggered_by": ["swallowing"],
    },

    # Converged Pathway
    {
        "stage": "C1",
        "when": {"swallowing": 1},
        "alert_level": "recommended",
        "message": "Swallowing significantly affected. PEG timing discussion important.",
        "triggered_by": ["swallowing"],
    },
    {
        "stage": "C1",
        "when": {"swallowing": 0},
        "alert_level": "urgent",
        "message": "Unable to swallow safely. PEG or alternative feeding needed.",
        "triggered_by": ["swallowing"],
    },
    {
        "stage": "C1",
        "when": {"swallowing": ["<=2", ">0"], "dyspnea": "<=2"},
        "alert_level": "urgent",
        "message": "Swallowing and breathing both affected. PEG timing is critical, discuss urgently.",
        "triggered_by": ["swallowing", "dyspnea"],
    },
    {
        "stage": "C2",
        "when": {"dyspnea": 3},
        "alert_level": "info",
        "message": "Breathlessness noticed. Respiratory function monitoring recommended.",
        "triggered_by": ["dyspnea"],
    },
    {
        "stage": "C2",
        "when": {"orthopnea": 2},
        "alert_level": "suggested",
        "message": "Sleeping flat is difficult. NIV assessment may help sleep quality.",
        "triggered_by": ["orthopnea"],
    },
    {
        "stage": "C2",
        "when_any": [{"dyspnea": 1}, {"orthopnea": 1}],
        "alert_level": "recommended",
        "message": "Significant breathing changes. NIV discussion recommended.",
        "triggered_by": ["dyspnea", "orthopnea"],
    },
    {
        "stage": "C2",
        "when": {"respiratory_insufficiency": ["<=3", ">0"]},
        "alert_level": "info",
        "message": "You're using ventilation support. View NIV optimisation resources.",
        "triggered_by": ["respiratory_insufficiency"],
    },
    {
        "stage": "C3",
        "when": {"dressing": "<=1"},
        "alert_level": "recommended",
        "message": "Self-care requires significant assistance. Care package review recommended.",
        "triggered_by": ["dressing"],
    },
    {
        "stage": "C3",
        "when": {"turning_in_bed": "<=1"},
        "alert_level": "recommended",
        "message": "Bed mobility requires assistance. Overnight care needs may be increasing.",
        "triggered_by": ["turning_in_bed"],
    },
    {
        "stage": "C3",
        "when": {TOTAL_SCORE_KEY: "<=20"},
        "alert_level": "recommended",
        "message": "Overall function significantly affected. Comprehensive care coordination recommended.",
        "triggered_by": [TOTAL_SCORE_KEY],
    },
    {
        "stage": "C4",
        "when": {TOTAL_SCORE_KEY: "<=15"},
        "alert_level": "suggested",
        "message": "Function significantly affected. Palliative care team can provide comfort-focused support.",
        "triggered_by": [TOTAL_SCORE_KEY],
    },
    {
        "stage": "C4",
        "when": {"respiratory_insufficiency": 0},
        "alert_level": "suggested",
        "message": "Advanced respiratory support in place. Palliative planning ensures your wishes are known.",
        "triggered_by": ["respiratory_insufficiency"],
    },
]


@dataclass
class StageTrigger:
    """One stage suggestion produced by an evaluation."""
    stage_id: str
    alert_level: AlertLevel
    message: str
    triggered_by: List[str]
    # Questions the winning rule read that were unanswered (and read as 0)
    defaulted_keys: List[str] = field(default_factory=list)

    @property
    def priority(self) -> int:
        return ALERT_PRIORITY[self.alert_level]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage_id": self.stage_id,
            "alert_level": self.alert_level.value,
            "message": self.message,
            "triggered_by": list(self.triggered_by),
            "defaulted_keys": list(self.defaulted_keys),
        }


def get_alert_priority(level: str) -> int:
    """Priority of an alert level; 0 for anything unrecognised."""
    try:
        return ALERT_PRIORITY[AlertLevel(level)]
    except ValueError:
        return 0


def parse_comparison(expected: str) -> Tuple[Callable[[Any, Any], bool], float]:
    """Split a comparison string like "<=2" into (operator, threshold)."""
    for symbol, op in _COMPARATORS:
        if expected.startswith(symbol):
            try:
                return op, float(expected[len(symbol):])
            except ValueError:
                break
    raise RuleConfigurationError(f"Malformed comparison: {expected!r}")


def compare(value: Any, expected: Any) -> bool:
    if isinstance(expected, (list, tuple)):
        return all(compare(value, item) for item in expected)
    if isinstance(expected, str):
        op, threshold = parse_comparison(expected)
        return op(value, threshold)
    return value == expected


def read_value(answers: AnswerSet, key: str, missing: str = MISSING_AS_ZERO) -> Optional[float]:
    """Value a rule sees for `key`; None means the condition cannot hold."""
    if key == TOTAL_SCORE_KEY:
        # Under MISSING_SKIP the total only exists once every question is answered
        if missing == MISSING_SKIP and any(q not in answers for q in QUESTION_KEYS):
            return None
        return sum(answers.values())
    if key in answers:
        return answers[key]
    return 0 if missing == MISSING_AS_ZERO else None


def condition_match(answers: AnswerSet, when: Dict[str, Any], missing: str = MISSING_AS_ZERO) -> bool:
    """Every key condition in `when` must hold."""
    for key, expected in when.items():
        value = read_value(answers, key, missing)
        if value is None or not compare(value, expected):
            return False
    return True


def change_match(answers: AnswerSet, previous: Optional[AnswerSet],
                 when_change: Dict[str, Any], missing: str = MISSING_AS_ZERO) -> bool:
    """Conditions on the per-key change since the previous answer set."""
    if previous is None:
        return False
    for key, expected in when_change.items():
        current = read_value(answers, key, missing)
        before = read_value(previous, key, missing)
        if current is None or before is None or not compare(current - before, expected):
            return False
    return True


def rule_matches(rule: Dict[str, Any], answers: AnswerSet,
                 previous: Optional[AnswerSet] = None, missing: str = MISSING_AS_ZERO) -> bool:
    if "when" in rule and not condition_match(answers, rule["when"], missing):
        return False
    if "when_any" in rule and not any(condition_match(answers, w, missing) for w in rule["when_any"]):
        return False
    if "when_change" in rule and not change_match(answers, previous, rule["when_change"], missing):
        return False
    return True


def referenced_keys(rule: Dict[str, Any]) -> List[str]:
    """Question ids a rule reads, in questionnaire order."""
    keys = set(rule.get("when", {}))
    for clause in rule.get("when_any", []):
        keys.update(clause)
    keys.update(rule.get("when_change", {}))
    if TOTAL_SCORE_KEY in keys:
        keys.update(QUESTION_KEYS)
    return [key for key in QUESTION_KEYS if key in keys]


def analyze_triggers(answers: AnswerSet, previous: Optional[AnswerSet] = None,
                     rules: Sequence[Dict[str, Any]] = TRIGGER_RULES,
                     missing: str = MISSING_AS_ZERO) -> List[StageTrigger]:
    """
    Evaluate the rule table against an answer set.

    Args:
        answers: current answers, possibly partial
        previous: answers from the previous assessment, for change rules
        rules: rule table, defaults to TRIGGER_RULES
        missing: MISSING_AS_ZERO reads unanswered questions as 0;
            MISSING_SKIP makes any condition on them fail

    Returns:
        At most one StageTrigger per stage, urgent first. Stages with equal
        priority keep the order in which they first matched.
    """
    if missing not in MISSING_POLICIES:
        raise ValueError(f"Unknown missing-answer policy: {missing!r}")

    triggered: Dict[str, StageTrigger] = {}
    for rule in rules:
        if not rule_matches(rule, answers, previous, missing):
            continue

        level = AlertLevel(rule["alert_level"])
        defaulted = []
        if missing == MISSING_AS_ZERO:
            defaulted = [key for key in referenced_keys(rule) if key not in answers]

        existing = triggered.get(rule["stage"])
        if existing is None:
            triggered[rule["stage"]] = StageTrigger(
                stage_id=rule["stage"],
                alert_level=level,
                message=rule["message"],
                triggered_by=list(rule["triggered_by"]),
                defaulted_keys=defaulted,
            )
        elif ALERT_PRIORITY[level] > existing.priority:
            existing.alert_level = level
            existing.message = rule["message"]
            existing.triggered_by = list(rule["triggered_by"])
            existing.defaulted_keys = defaulted

    results = sorted(triggered.values(), key=lambda t: t.priority, reverse=True)

    for trigger in results:
        if trigger.defaulted_keys:
            logger.warning(
                "Stage %s (%s) triggered with unanswered questions read as 0: %s",
                trigger.stage_id, trigger.alert_level.value, ", ".join(trigger.defaulted_keys),
            )
    logger.debug("Evaluated %d rules, %d stage triggers", len(rules), len(results))
    return results


def top_triggers(triggers: Sequence[StageTrigger], limit: Optional[int] = None) -> List[StageTrigger]:
    """Display policy: the first `limit` triggers (DISPLAY["alert_limit"] by default)."""
    if limit is None:
        limit = DISPLAY["alert_limit"]
    if limit < 0:
        raise ValueError("limit must not be negative")
    return list(triggers[:limit])


def _check_condition(expected: Any, where: str) -> None:
    if isinstance(expected, (list, tuple)):
        if not expected:
            raise RuleConfigurationError(f"{where}: empty condition list")
        for item in expected:
            _check_condition(item, where)
    elif isinstance(expected, str):
        parse_comparison(expected)
    elif isinstance(expected, bool) or not isinstance(expected, (int, float)):
        raise RuleConfigurationError(f"{where}: unsupported condition {expected!r}")


def validate_trigger_rules(rules: Sequence[Dict[str, Any]] = TRIGGER_RULES,
                           stage_ids: Sequence[str] = STAGE_IDS) -> None:
    """
    Check a rule table once at start-up.

    Raises:
        RuleConfigurationError: unknown stage, alert level or question id,
        a rule without triggered_by keys or any predicate clause, an empty
        when_any, or a malformed condition.
    """
    known_keys = set(QUESTION_KEYS) | {TOTAL_SCORE_KEY}
    for index, rule in enumerate(rules):
        where = f"rule {index} ({rule.get('stage')})"
        if rule.get("stage") not in stage_ids:
            raise RuleConfigurationError(f"{where}: unknown stage")
        if get_alert_priority(rule.get("alert_level")) == 0:
            raise RuleConfigurationError(f"{where}: unknown alert level {rule.get('alert_level')!r}")
        if not rule.get("message"):
            raise RuleConfigurationError(f"{where}: missing message")
        if not isinstance(rule.get("triggered_by"), (list, tuple)) or not rule["triggered_by"]:
            raise RuleConfigurationError(f"{where}: triggered_by must list at least one key")
        if not any(clause in rule for clause in ("when", "when_any", "when_change")):
            raise RuleConfigurationError(f"{where}: no predicate clause")
        if "when_any" in rule and not rule["when_any"]:
            raise RuleConfigurationError(f"{where}: empty when_any can never match")

        clauses = [rule.get("when", {}), rule.get("when_change", {})] + list(rule.get("when_any", []))
        for clause in clauses:
            for key, expected in clause.items():
                if key not in known_keys:
                    raise RuleConfigurationError(f"{where}: unknown question {key!r}")
                _check_condition(expected, where)
        if TOTAL_SCORE_KEY in rule.get("when_change", {}):
            raise RuleConfigurationError(f"{where}: change rules must name questions")

        unknown = [key for key in rule["triggered_by"] if key not in known_keys]
        if unknown:
            raise RuleConfigurationError(f"{where}: unknown triggered_by {unknown}")

    logger.info("Validated %d trigger rules", len(rules))
