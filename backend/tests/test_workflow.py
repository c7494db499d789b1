import pytest

from signingconnect.errors import InvalidTransition, ValidationFailed
from signingconnect.services.workflow import (
    ApplicationStatus,
    JobStatus,
    parse_application_status,
    parse_job_status,
    validate_application_transition,
    validate_job_transition,
)
from signingconnect.utils.money import from_cents, to_cents, to_whole


class TestApplicationTransitions:
    @pytest.mark.parametrize("target", list(ApplicationStatus))
    def test_pending_can_go_anywhere(self, target):
        validate_application_transition(ApplicationStatus.PENDING, target)

    @pytest.mark.parametrize("terminal", [ApplicationStatus.APPROVED, ApplicationStatus.REJECTED])
    def test_terminal_states_only_accept_themselves(self, terminal):
        validate_application_transition(terminal, terminal)
        for other in ApplicationStatus:
            if other is not terminal:
                with pytest.raises(InvalidTransition):
                    validate_application_transition(terminal, other)

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValidationFailed) as exc:
            parse_application_status("archived")
        assert "pending, under_review, approved, rejected" in exc.value.message
        with pytest.raises(ValidationFailed):
            parse_application_status(None)


class TestJobTransitions:
    def test_happy_path(self):
        path = [JobStatus.OPEN, JobStatus.FILLED, JobStatus.IN_PROGRESS, JobStatus.COMPLETED]
        for current, target in zip(path, path[1:]):
            validate_job_transition(current, target)

    def test_cannot_skip_ahead(self):
        with pytest.raises(InvalidTransition):
            validate_job_transition(JobStatus.OPEN, JobStatus.IN_PROGRESS)

    def test_completed_is_terminal(self):
        with pytest.raises(InvalidTransition):
            validate_job_transition(JobStatus.COMPLETED, JobStatus.CANCELLED)

    def test_parse(self):
        assert parse_job_status("in_progress") is JobStatus.IN_PROGRESS


class TestMoney:
    @pytest.mark.parametrize("value,cents", [
        ("125.00", 12500),
        ("125", 12500),
        (125, 12500),
        ("0.65", 65),
        (0.655, 66),
        (" 99.99 ", 9999),
    ])
    def test_to_cents(self, value, cents):
        assert to_cents(value) == cents

    def test_blank_uses_default(self):
        assert to_cents("", 12500) == 12500
        assert to_cents(None, 65) == 65

    def test_blank_without_default(self):
        with pytest.raises(ValidationFailed):
            to_cents(None)

    @pytest.mark.parametrize("value", ["abc", "-5", "nan", "Infinity", "1e30"])
    def test_rejects_bad_amounts(self, value):
        with pytest.raises(ValidationFailed):
            to_cents(value)

    def test_to_whole_truncates(self):
        assert to_whole("500000.75") == 500000
        assert to_whole(250000) == 250000

    @pytest.mark.parametrize("value", ["-1", "Infinity", "1e30", "lots"])
    def test_to_whole_rejects(self, value):
        with pytest.raises(ValidationFailed):
            to_whole(value, "Insurance amount")

    def test_from_cents(self):
        assert from_cents(12500) == 125
        assert isinstance(from_cents(12500), int)
        assert from_cents(65) == 0.65
        assert from_cents(None) is None
