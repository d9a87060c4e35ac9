"""Error kinds raised by the matchmaking services.

Every kind carries a stable ``code`` so callers can tell them apart without
parsing messages, and the HTTP status the API renders it with. They subclass
``ValueError`` so plain ``except ValueError`` callers keep working.
"""


class MatchmakingError(ValueError):
    code = "matchmaking_error"
    status_code = 400
    default_message = "Request could not be completed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(MatchmakingError):
    code = "validation_error"
    status_code = 422
    default_message = "Invalid input"


class NotFound(MatchmakingError):
    code = "not_found"
    status_code = 404
    default_message = "Not found"


class NotHost(MatchmakingError):
    code = "not_host"
    status_code = 403
    default_message = "Only the group host can do this"


class NotParticipant(MatchmakingError):
    code = "not_participant"
    status_code = 403
    default_message = "You are not a participant of this group"


class HostSelfApply(MatchmakingError):
    code = "host_self_apply"
    status_code = 409
    default_message = "You cannot apply to your own group"


class AlreadyEngaged(MatchmakingError):
    code = "already_engaged"
    status_code = 409
    default_message = "You are already taking part in an active group"


class AlreadyApplied(MatchmakingError):
    code = "already_applied"
    status_code = 409
    default_message = "You have already applied to this group"


class HostAlreadyActive(MatchmakingError):
    code = "host_already_active"
    status_code = 409
    default_message = "You already host an active group. Close it before creating another"


class NotEligible(MatchmakingError):
    code = "not_eligible"
    status_code = 409
    default_message = "Your profile does not meet this group's requirements"


class GroupUnavailable(MatchmakingError):
    code = "group_unavailable"
    status_code = 409
    default_message = "This group is no longer accepting changes"


class GroupFull(MatchmakingError):
    code = "group_full"
    status_code = 409
    default_message = "This group is full"


class MatchAlreadyDecided(MatchmakingError):
    code = "match_already_decided"
    status_code = 409
    default_message = "This application has already been decided"


class DuplicateRating(MatchmakingError):
    code = "duplicate_rating"
    status_code = 409
    default_message = "You have already rated this player in this group"


class RatingWindowClosed(MatchmakingError):
    code = "rating_window_closed"
    status_code = 409
    default_message = "The rating window for this group is closed"


class ProfileExists(MatchmakingError):
    code = "profile_exists"
    status_code = 409
    default_message = "A player profile already exists for this account"


class NicknameTaken(MatchmakingError):
    code = "nickname_taken"
    status_code = 409
    default_message = "This nickname is already in use"


class StoreUnavailable(MatchmakingError):
    code = "store_unavailable"
    status_code = 503
    default_message = "The data store is temporarily unavailable, try again later"
