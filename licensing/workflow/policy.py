"""
Role policy: who may do what, and where the chain goes on its own.

POLICY is the single lookup table status -> role -> allowed actions. Roles are
a closed enum; nothing here inspects role names as strings. Stage 1 and stage 2
of the Executive and City Engineer share one role each and are told apart by
the status they act on.
"""
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional

from licensing.workflow.errors import AuthorizationError
from licensing.workflow.status import Action, ApplicationStatus as S, PositionType, Role


@dataclass(frozen=True)
class Actor:
    role: Role
    actor_id: Optional[int] = None
    position_type: Optional[PositionType] = None

    @classmethod
    def system(cls) -> "Actor":
        return cls(role=Role.SYSTEM)


SIGN_ACTIONS = frozenset({Action.GENERATE_OTP, Action.VERIFY_AND_SIGN, Action.REJECT})
PAYMENT_ACTIONS = frozenset({Action.INITIATE_PAYMENT, Action.CONFIRM_PAYMENT})

POLICY: Dict[S, Dict[Role, FrozenSet[Action]]] = {
    S.DRAFT: {
        Role.APPLICANT: frozenset({Action.SAVE_DRAFT, Action.SUBMIT}),
    },
    S.SUBMITTED: {
        Role.SYSTEM: frozenset({Action.ASSIGN, Action.REJECT}),
    },
    S.JE_PENDING: {
        Role.JUNIOR_ENGINEER: frozenset({Action.SCHEDULE_APPOINTMENT, Action.REJECT}),
    },
    S.APPOINTMENT_SCHEDULED: {
        Role.JUNIOR_ENGINEER: frozenset({Action.RESCHEDULE_APPOINTMENT, Action.APPROVE, Action.REJECT}),
    },
    S.AE_PENDING: {Role.ASSISTANT_ENGINEER: SIGN_ACTIONS},
    S.EE_STAGE1_PENDING: {Role.EXECUTIVE_ENGINEER: SIGN_ACTIONS},
    S.CE_STAGE1_PENDING: {Role.CITY_ENGINEER: SIGN_ACTIONS},
    # No officer owns the payment stage, so it cannot be rejected.
    S.PAYMENT_PENDING: {
        Role.APPLICANT: PAYMENT_ACTIONS,
        Role.SYSTEM: PAYMENT_ACTIONS,
    },
    S.CLERK_PENDING: {
        Role.CLERK: frozenset({Action.APPROVE, Action.REJECT}),
    },
    S.EE_STAGE2_PENDING: {Role.EXECUTIVE_ENGINEER: SIGN_ACTIONS},
    S.CE_STAGE2_PENDING: {Role.CITY_ENGINEER: SIGN_ACTIONS},
    S.REJECTED: {
        Role.APPLICANT: frozenset({Action.SAVE_DRAFT, Action.RESUBMIT}),
    },
}

# Pass-through states. CE_STAGE1_SIGNED is resolved by next_auto_status.
AUTO_FORWARD: Dict[S, S] = {
    S.JE_VERIFIED: S.AE_PENDING,
    S.AE_SIGNED: S.EE_STAGE1_PENDING,
    S.EE_STAGE1_SIGNED: S.CE_STAGE1_PENDING,
    S.PAID: S.CLERK_PENDING,
    S.CLERK_APPROVED: S.EE_STAGE2_PENDING,
    S.EE_STAGE2_SIGNED: S.CE_STAGE2_PENDING,
    S.CE_STAGE2_SIGNED: S.APPROVED,
}

SIGN_TRANSITIONS: Dict[S, S] = {
    S.AE_PENDING: S.AE_SIGNED,
    S.EE_STAGE1_PENDING: S.EE_STAGE1_SIGNED,
    S.CE_STAGE1_PENDING: S.CE_STAGE1_SIGNED,
    S.EE_STAGE2_PENDING: S.EE_STAGE2_SIGNED,
    S.CE_STAGE2_PENDING: S.CE_STAGE2_SIGNED,
}


def is_auto_forward(status) -> bool:
    return S(status) in AUTO_FORWARD or S(status) == S.CE_STAGE1_SIGNED


def next_auto_status(application) -> Optional[S]:
    status = S(application.status)
    if status == S.CE_STAGE1_SIGNED:
        if application.fee_amount == 0 or application.payment_completed:
            return S.CLERK_PENDING
        return S.PAYMENT_PENDING
    return AUTO_FORWARD.get(status)


def allowed_actions(status, role: Role) -> FrozenSet[Action]:
    try:
        return POLICY.get(S(status), {}).get(Role(role), frozenset())
    except ValueError:
        return frozenset()


def states_for_role(role: Role) -> List[S]:
    """Statuses in which the role has at least one action."""
    return [status for status, roles in POLICY.items() if Role(role) in roles]


def ensure_permitted(application, actor: Actor, action: Action) -> None:
    """Raise AuthorizationError unless the actor may take the action right now."""
    if Action(action) not in allowed_actions(application.status, actor.role):
        raise AuthorizationError()

    if actor.role == Role.APPLICANT and application.applicant_id != actor.actor_id:
        raise AuthorizationError()

    if actor.role == Role.ASSISTANT_ENGINEER:
        if actor.position_type is None or int(actor.position_type) != application.position_type:
            raise AuthorizationError()
