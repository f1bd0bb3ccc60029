"""Exception types raised at the engine's input boundary.

Infeasible rosters are never reported through exceptions; they surface as
warnings on the affected Day.
"""


class StoreRotaError(Exception):
    """Base class for all storerota errors."""


class InvalidInputError(StoreRotaError, ValueError):
    """Malformed clock string, requirement table or configuration."""


class UnknownTemplateError(InvalidInputError):
    """A shift code that is not in the role's template catalog."""

    def __init__(self, code: str, role: str = ""):
        self.code = code
        self.role = role
        where = f" for role {role}" if role else ""
        super().__init__(f"Unknown shift template code {code!r}{where}")


class UnknownPersonError(InvalidInputError):
    """A person id that is not in the roster."""

    def __init__(self, person_id: str):
        self.person_id = person_id
        super().__init__(f"Unknown person id {person_id!r}")
