"""Unit tests for individual notification rules.

Each rule is checked on its own against (snapshot, transition) fixtures.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from approval_notifier.notifications.recipients import ConfigLookupError, RecipientConfig
from approval_notifier.notifications.rules import (
    ApprovalRequestedRule,
    CompletedRequestorRule,
    CompletedServiceProviderRule,
    EndorsementRequestedRule,
    MissingRecipientError,
    RegionalApprovalRequestedRule,
    RevisionRequestedRule,
    WithdrawnRule,
)
from approval_notifier.workflow.snapshot import Stage, StageFields
from approval_notifier.workflow.status import ApprovalStatus, Decision, StatusTransition

S = ApprovalStatus

FIRING_STATUS = {
    EndorsementRequestedRule: S.AWAITING_ENDORSEMENT,
    ApprovalRequestedRule: S.AWAITING_APPROVAL,
    RegionalApprovalRequestedRule: S.AWAITING_REGIONAL_APPROVAL,
    RevisionRequestedRule: S.AWAITING_REVISION,
    WithdrawnRule: S.WITHDRAWN,
    CompletedRequestorRule: S.COMPLETED,
    CompletedServiceProviderRule: S.COMPLETED,
}


@pytest.mark.parametrize("rule_cls", list(FIRING_STATUS))
@pytest.mark.parametrize("new_status", list(ApprovalStatus))
def test_rule_applies_only_to_its_status(
    make_snapshot, make_transition, rule_cls, new_status: ApprovalStatus
) -> None:
    rule = rule_cls()
    old_status = S.AWAITING_APPROVAL if new_status is not S.AWAITING_APPROVAL else S.DRAFT
    applies = rule.applies_to(make_snapshot(), make_transition(old_status, new_status))
    assert applies is (new_status is FIRING_STATUS[rule_cls])


def test_rule_rejects_values_outside_the_status_enumeration(make_snapshot) -> None:
    transition = StatusTransition(
        entity_id="req-1",
        old_status=S.DRAFT,
        new_status="archived",  # type: ignore[arg-type]
        occurred_at=datetime(2025, 1, 1, tzinfo=UTC),
    )
    with pytest.raises(AssertionError):
        CompletedRequestorRule().applies_to(make_snapshot(), transition)


def test_withdrawing_a_draft_is_silent(make_snapshot, make_transition) -> None:
    rule = WithdrawnRule()
    assert rule.applies_to(make_snapshot(), make_transition(S.DRAFT, S.WITHDRAWN)) is False
    assert rule.applies_to(
        make_snapshot(), make_transition(S.AWAITING_APPROVAL, S.WITHDRAWN)
    ) is True


def test_endorsement_requested_goes_to_endorser(make_snapshot, recipient_config) -> None:
    recipients = EndorsementRequestedRule().recipients(make_snapshot(), recipient_config)
    assert recipients.to == ("endorser@example.org",)
    assert recipients.cc == ("owner@example.org",)


def test_endorsement_requested_without_endorser_fails(make_snapshot, recipient_config) -> None:
    with pytest.raises(MissingRecipientError):
        EndorsementRequestedRule().recipients(
            make_snapshot(endorser_email=None), recipient_config
        )


def test_group_rules_use_the_entity_region(make_snapshot, recipient_config) -> None:
    snapshot = make_snapshot(region="South")

    assert ApprovalRequestedRule().recipients(snapshot, recipient_config).to == (
        "south-plan@example.org",
    )
    regional = RegionalApprovalRequestedRule().recipients(snapshot, recipient_config)
    assert regional.to == ("south-rm@example.org",)
    assert regional.cc == ("south-plan@example.org",)
    provider = CompletedServiceProviderRule().recipients(snapshot, recipient_config)
    assert provider.to == ("south-sp@example.com",)
    assert provider.cc == ("south-plan@example.org",)


def test_unknown_region_raises_config_lookup_error(make_snapshot, recipient_config) -> None:
    with pytest.raises(ConfigLookupError) as excinfo:
        CompletedServiceProviderRule().recipients(make_snapshot(region="east"), recipient_config)
    assert excinfo.value.region == "east"


def test_requestor_rules_need_no_distribution_lists(make_snapshot) -> None:
    empty = RecipientConfig()
    assert CompletedRequestorRule().recipients(make_snapshot(), empty).to == (
        "owner@example.org",
    )
    assert RevisionRequestedRule().recipients(make_snapshot(), empty).cc == ()


def test_subject_and_template(make_snapshot, make_transition) -> None:
    rule = CompletedServiceProviderRule()
    transition = make_transition(S.AWAITING_REGIONAL_APPROVAL, S.COMPLETED)
    assert rule.template_id(make_snapshot(), transition) == "completed_service_provider"
    assert rule.subject(make_snapshot(), transition) == "WR-0001: Work approved for delivery"


def test_model_includes_last_actor(make_snapshot, make_transition) -> None:
    snapshot = make_snapshot(
        Stage.ENDORSEMENT,
        stages={
            Stage.COMPLETION: StageFields(
                retained="Signed off",
                decided_by="R. Manager",
                decision=Decision.APPROVED,
                decision_date=datetime(2025, 3, 1, tzinfo=UTC),
            )
        },
    )
    model = CompletedRequestorRule().model(
        snapshot, make_transition(S.AWAITING_REGIONAL_APPROVAL, S.COMPLETED)
    )

    assert model["reference"] == "WR-0001"
    assert model["new_status"] == "completed"
    assert model["occurred_at"] == "2025-03-14T09:30:00+00:00"
    assert model["last_actor_stage"] == "completion"
    assert model["last_actor_name"] == "R. Manager"
    assert model["last_actor_decision"] == "approved"
    assert model["last_actor_decision_date"] == "2025-03-01T00:00:00+00:00"


def test_model_without_last_actor_uses_blanks(make_snapshot, make_transition) -> None:
    model = EndorsementRequestedRule().model(
        make_snapshot(), make_transition(S.DRAFT, S.AWAITING_ENDORSEMENT)
    )
    assert model["last_actor_stage"] == ""
    assert model["last_actor_name"] == ""
