import enum


class ShiftTiming(str, enum.Enum):
    """The fixed slot labels a ShiftTemplate can carry."""
    evening = "evening"
    night = "night"
    early_morning = "early_morning"


class StaffStatus(str, enum.Enum):
    active = "active"
    unavailable = "unavailable"
    inactive = "inactive"


class ApplicationStatus(str, enum.Enum):
    applied = "applied"
    withdrawn = "withdrawn"
    approved = "approved"
    rejected = "rejected"

    def can_transition_to(self, target: "ApplicationStatus") -> bool:
        return target in APPLICATION_TRANSITIONS[self]

    @property
    def is_pending(self) -> bool:
        return self is ApplicationStatus.applied


APPLICATION_TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    ApplicationStatus.applied: frozenset(
        {ApplicationStatus.approved, ApplicationStatus.rejected, ApplicationStatus.withdrawn}
    ),
    # approved without an assignment (assignment removed later) can still be released
    ApplicationStatus.approved: frozenset({ApplicationStatus.rejected, ApplicationStatus.withdrawn}),
    ApplicationStatus.rejected: frozenset(),
    ApplicationStatus.withdrawn: frozenset(),
}


class TimeOffStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    denied = "denied"

    def can_transition_to(self, target: "TimeOffStatus") -> bool:
        return target in TIME_OFF_TRANSITIONS[self]


TIME_OFF_TRANSITIONS: dict[TimeOffStatus, frozenset[TimeOffStatus]] = {
    TimeOffStatus.pending: frozenset({TimeOffStatus.approved, TimeOffStatus.denied}),
    TimeOffStatus.approved: frozenset(),
    TimeOffStatus.denied: frozenset(),
}
