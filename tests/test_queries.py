"""
Tests for officer queues, dashboards and application views.
"""

import pytest

from conftest import _make_officer, make_applicant, make_application
from licensing.services.account_service import OfficerService
from licensing.workflow import queries
from licensing.workflow.errors import AuthorizationError, NotFoundError
from licensing.workflow.policy import Actor
from licensing.workflow.status import ApplicationStatus as S, PositionType, Role


class TestPending:
    def test_junior_engineer_queue(self, db, workflow, actors, applicant, application):
        draft = make_application(db, applicant)
        workflow.submit(application.id)

        pending = queries.get_pending_applications(db, actors[Role.JUNIOR_ENGINEER])

        assert [p["id"] for p in pending] == [application.id]
        assert pending[0]["status_name"]
        assert draft.id not in [p["id"] for p in pending]

    def test_queue_follows_the_application(self, db, workflow, actors, application):
        workflow.to_ae_pending(application.id)

        assert queries.get_pending_applications(db, actors[Role.JUNIOR_ENGINEER]) == []
        assert [p["id"] for p in queries.get_pending_applications(db, actors[Role.ASSISTANT_ENGINEER])] == [application.id]

    def test_assistant_engineer_sees_own_position_only(self, db, workflow, application):
        workflow.to_ae_pending(application.id)
        structural = OfficerService.actor_for(
            _make_officer(db, Role.ASSISTANT_ENGINEER, PositionType.STRUCTURAL_ENGINEER, email="ae.se@pmc.example.com")
        )
        assert queries.get_pending_applications(db, structural) == []

    def test_assistant_engineer_without_position_sees_nothing(self, db, workflow, application):
        workflow.to_ae_pending(application.id)
        unassigned = Actor(role=Role.ASSISTANT_ENGINEER, actor_id=99)
        assert queries.get_pending_applications(db, unassigned) == []

    def test_position_filter(self, db, workflow, actors, application):
        workflow.submit(application.id)
        je = actors[Role.JUNIOR_ENGINEER]

        assert len(queries.get_pending_applications(db, je, int(PositionType.LICENCE_ENGINEER))) == 1
        assert queries.get_pending_applications(db, je, int(PositionType.ARCHITECT)) == []

    def test_stage_two_shares_the_executive_queue(self, db, workflow, actors, application):
        workflow.to_clerk_pending(application.id)
        workflow.engine.approve(application.id, actors[Role.CLERK])

        pending = queries.get_pending_applications(db, actors[Role.EXECUTIVE_ENGINEER])
        assert [p["status"] for p in pending] == [int(S.EE_STAGE2_PENDING)]

    def test_applicants_have_no_queue(self, db, applicant_actor, application):
        assert queries.get_pending_applications(db, applicant_actor) == []


class TestDashboard:
    def test_counts_by_status(self, db, workflow, actors, applicant, application):
        second = make_application(db, applicant)
        workflow.submit(application.id)
        workflow.submit(second.id)
        workflow.schedule(second.id)

        stats = queries.dashboard_stats(db, actors[Role.JUNIOR_ENGINEER])

        assert stats["role"] == Role.JUNIOR_ENGINEER.value
        assert stats["total_pending"] == 2
        assert stats["by_status"] == {"Pending with Junior Engineer": 1, "Appointment Scheduled": 1}

    def test_applicants_have_no_counts(self, db, workflow, applicant, applicant_actor, application):
        make_application(db, make_applicant(db, email="other@example.com"))
        workflow.to_stage1_complete(application.id)

        stats = queries.dashboard_stats(db, applicant_actor)

        assert stats["total_pending"] == 0
        assert stats["by_status"] == {}
        assert queries.dashboard_stats(db, Actor.system())["total_pending"] == 0

    def test_assistant_engineer_without_position_counts_nothing(self, db, workflow, application):
        workflow.to_ae_pending(application.id)
        unassigned = Actor(role=Role.ASSISTANT_ENGINEER, actor_id=99)

        stats = queries.dashboard_stats(db, unassigned)

        assert stats["total_pending"] == 0
        assert set(stats["by_status"].values()) == {0}

    def test_assistant_engineer_counts_own_position(self, db, workflow, actors, application):
        workflow.to_ae_pending(application.id)
        assert queries.dashboard_stats(db, actors[Role.ASSISTANT_ENGINEER])["total_pending"] == 1


class TestApplicationView:
    def test_officer_view_lists_allowed_actions(self, db, workflow, actors, application):
        workflow.submit(application.id)

        view = queries.get_application(db, application.id, actors[Role.JUNIOR_ENGINEER])

        assert view["workflow"]["allowed_actions"] == ["reject", "schedule_appointment"]
        assert view["personal"]["pan_number"] == "ABCDE1234F"
        assert view["addresses"]["local"]["city"] == "Pune"
        assert view["payment"]["fee_amount"] == 3000

    def test_view_at_signature_stage(self, db, workflow, actors, application):
        workflow.to_ae_pending(application.id)
        view = queries.get_application(db, application.id, actors[Role.ASSISTANT_ENGINEER])

        assert view["workflow"]["signature_document"] == "RECOMMENDATION_FORM"
        assert view["workflow"]["active_appointment"] is None

    def test_rejection_is_shown(self, db, workflow, actors, applicant_actor, application):
        workflow.submit(application.id)
        workflow.engine.reject(application.id, actors[Role.JUNIOR_ENGINEER], "Wrong PAN")

        rejection = queries.get_application(db, application.id, applicant_actor)["workflow"]["rejection"]
        assert rejection["stage"] == int(S.JE_PENDING)
        assert rejection["reason"] == "Wrong PAN"
        assert rejection["rejected_by"] == Role.JUNIOR_ENGINEER.value

    def test_applicant_cannot_read_others(self, db, application):
        stranger = make_applicant(db, email="stranger@example.com")
        with pytest.raises(AuthorizationError):
            queries.get_application(db, application.id, Actor(role=Role.APPLICANT, actor_id=stranger.id))
        with pytest.raises(AuthorizationError):
            queries.get_status_history(db, application.id, Actor(role=Role.APPLICANT, actor_id=stranger.id))

    def test_unknown_application(self, db, applicant_actor):
        with pytest.raises(NotFoundError):
            queries.get_application(db, 4242, applicant_actor)

    def test_history_has_display_names(self, db, workflow, applicant_actor, application):
        workflow.submit(application.id)
        history = queries.get_status_history(db, application.id, applicant_actor)
        assert [h["to_status"] for h in history] == [int(S.SUBMITTED), int(S.JE_PENDING)]
        assert all(h["to_status_name"] for h in history)

    def test_applicant_listing(self, db, applicant, application):
        make_application(db, applicant)
        listing = queries.get_applicant_applications(db, applicant.id)
        assert len(listing) == 2
        assert listing[0]["id"] > listing[1]["id"]
