"""Typed failures raised by the competition core.

Every error is detected before any write, so a raised error always means
nothing was persisted. ``code`` is the stable kind name surfaced to clients;
``status`` is the HTTP status the API layer renders it with.
"""


class CompetitionError(Exception):
    code = 'competition_error'
    status = 400
    default_message = 'Operation failed'

    def __init__(self, message=None, **context):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def to_dict(self):
        payload = {'error': self.message, 'code': self.code}
        if self.context:
            payload['details'] = self.context
        return payload


# ---- Validation errors ----

class ValidationError(CompetitionError):
    code = 'validation_error'
    default_message = 'Invalid data'


class EmptyConfig(ValidationError):
    code = 'EmptyConfig'
    default_message = 'Scoring configuration must have at least one placement'


class NonPositivePlacement(ValidationError):
    code = 'NonPositivePlacement'
    default_message = 'Placements must be positive integers'


class MissingFirstPlace(ValidationError):
    code = 'MissingFirstPlace'
    default_message = 'Scoring must start with 1st place'


class NonContiguousPlacements(ValidationError):
    code = 'NonContiguousPlacements'
    default_message = 'Scoring placements must be consecutive (1, 2, 3, ...)'


class NegativePoints(ValidationError):
    code = 'NegativePoints'
    default_message = 'Points must be non-negative integers'


class EmptyName(ValidationError):
    code = 'EmptyName'
    default_message = 'Name is required'


class EmptyCategory(ValidationError):
    code = 'EmptyCategory'
    default_message = 'Category is required'


class EmptyHouse(ValidationError):
    code = 'EmptyHouse'
    default_message = 'House is required'


class InvalidEventType(ValidationError):
    code = 'InvalidEventType'
    default_message = "Event type must be 'individual' or 'group'"


class InvalidColor(ValidationError):
    code = 'InvalidColor'
    default_message = 'Invalid hex color format. Expected format: #RRGGBB'


class ReadOnlyField(ValidationError):
    code = 'ReadOnlyField'
    default_message = 'Field cannot be updated directly'


# ---- Lookup errors ----

class NotFound(CompetitionError):
    code = 'NotFound'
    status = 404
    default_message = 'Not found'


# ---- State errors ----

class StateError(CompetitionError):
    code = 'state_error'
    status = 409


class InvalidTransition(StateError):
    code = 'InvalidTransition'
    default_message = 'Transition not allowed from the current status'


class AlreadyScheduled(StateError):
    code = 'AlreadyScheduled'
    default_message = 'Event is already scheduled'


class CannotDeleteActive(StateError):
    code = 'CannotDeleteActive'
    default_message = 'Cannot delete an event that is in progress. Please complete or reset it first.'


class CannotDeleteCompleted(StateError):
    code = 'CannotDeleteCompleted'
    default_message = 'Cannot delete a completed event. This would affect scoring history.'


class DuplicateName(StateError):
    code = 'DuplicateName'
    default_message = 'Name is already taken'


# ---- Result errors ----

class ResultError(CompetitionError):
    code = 'result_error'


class EmptyResults(ResultError):
    code = 'EmptyResults'
    default_message = 'Event results are required to complete an event'


class DuplicatePlacement(ResultError):
    code = 'DuplicatePlacement'
    default_message = 'Each placement can only be assigned once'


class UnknownPlacement(ResultError):
    code = 'UnknownPlacement'
    default_message = 'Placement is not configured in the scoring system'


class MalformedResult(ResultError):
    code = 'MalformedResult'
    default_message = 'Each result must be an object with a placement and a participant id'
