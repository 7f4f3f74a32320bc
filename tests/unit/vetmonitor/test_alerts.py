"""Tests for alert threshold evaluation in `vetmonitor/services/alerts.py`."""

from datetime import UTC, datetime

import pytest

from vetmonitor.domain.errors import ConfigurationError
from vetmonitor.domain.models import (
    AlertSeverity,
    AlertThreshold,
    BooleanValue,
    EnumerationValue,
    NumericValue,
    Observation,
    ObservationValue,
)
from vetmonitor.services.alerts import Condition, evaluate_thresholds, parse_condition

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)


def _observation(value: ObservationValue, symptom_schema_id: str = "temperature") -> Observation:
    return Observation(
        patient_id="max", symptom_schema_id=symptom_schema_id, recorded_at=NOW, value=value
    )


class TestParseCondition:
    @pytest.mark.parametrize(
        ("condition", "op", "operand"),
        [
            ("> 39.5", ">", 39.5),
            (">=7", ">=", 7.0),
            ("  <   2 ", "<", 2.0),
            ("= SEVERE", "=", "SEVERE"),
            ("== 'NONE'", "==", "NONE"),
            ("!= GOOD", "!=", "GOOD"),
        ],
    )
    def test_parses_operator_and_operand(
        self, condition: str, op: str, operand: float | str
    ) -> None:
        assert parse_condition(condition) == Condition(op=op, operand=operand)

    @pytest.mark.parametrize("condition", ["", "39.5", "about 40", ">"])
    def test_unreadable_condition(self, condition: str) -> None:
        with pytest.raises(ConfigurationError, match="Unreadable"):
            parse_condition(condition)

    def test_ordering_against_text_is_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="non-numeric"):
            parse_condition("> SEVERE")


class TestConditionMatches:
    def test_numeric_comparison(self) -> None:
        condition = parse_condition("> 39.5")
        assert condition.matches(40.1)
        assert not condition.matches(39.5)

    def test_numeric_condition_ignores_text(self) -> None:
        assert not parse_condition("> 3").matches("GOOD")

    def test_text_equality(self) -> None:
        assert parse_condition("= NONE").matches("NONE")
        assert not parse_condition("= NONE").matches("none")

    def test_missing_value_never_matches(self) -> None:
        assert not parse_condition("!= GOOD").matches(None)


class TestEvaluateThresholds:
    def test_every_matching_threshold_raises_an_alert(self) -> None:
        thresholds = [
            AlertThreshold(
                id="warn", symptom_schema_id="temperature", condition="> 39.5", message="Warm"
            ),
            AlertThreshold(
                id="crit",
                symptom_schema_id="temperature",
                condition=">= 40.5",
                severity=AlertSeverity.CRITICAL,
                message="Fever",
            ),
        ]
        observation = _observation(NumericValue(value=40.8))

        alerts = evaluate_thresholds(observation, thresholds, NOW)

        assert [a.threshold_id for a in alerts] == ["warn", "crit"]
        assert alerts[1].severity == AlertSeverity.CRITICAL
        assert alerts[1].observation_id == observation.id
        assert alerts[1].patient_id == "max"
        assert alerts[1].triggered_at == NOW

    def test_no_alert_below_threshold(self) -> None:
        threshold = AlertThreshold(
            symptom_schema_id="temperature", condition="> 39.5", message="Warm"
        )
        assert evaluate_thresholds(_observation(NumericValue(value=38.6)), [threshold], NOW) == []

    def test_thresholds_of_other_symptoms_are_skipped(self) -> None:
        threshold = AlertThreshold(symptom_schema_id="pain", condition="> 1", message="Pain")
        assert evaluate_thresholds(_observation(NumericValue(value=40)), [threshold], NOW) == []

    def test_enumeration_threshold(self) -> None:
        threshold = AlertThreshold(
            symptom_schema_id="appetite", condition="= NONE", message="Not eating"
        )
        observation = _observation(EnumerationValue(value="NONE"), "appetite")
        assert len(evaluate_thresholds(observation, [threshold], NOW)) == 1

    def test_boolean_compares_as_true_or_false(self) -> None:
        threshold = AlertThreshold(
            symptom_schema_id="limping", condition="= true", message="Limping again"
        )
        limping = _observation(BooleanValue(value=True), "limping")
        walking = _observation(BooleanValue(value=False), "limping")

        assert len(evaluate_thresholds(limping, [threshold], NOW)) == 1
        assert evaluate_thresholds(walking, [threshold], NOW) == []

    def test_malformed_threshold_propagates(self) -> None:
        threshold = AlertThreshold(
            symptom_schema_id="temperature", condition="very high", message="?"
        )
        with pytest.raises(ConfigurationError):
            evaluate_thresholds(_observation(NumericValue(value=40)), [threshold], NOW)
