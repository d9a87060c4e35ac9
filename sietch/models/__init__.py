from sietch.models.base import Base  # noqa: F401
from sietch.models.group_ad import GroupAd, GroupObjective, GroupStatus, RoleType  # noqa: F401
from sietch.models.match import Match, MatchStatus  # noqa: F401
from sietch.models.player import Interest, Player, ToolCategory  # noqa: F401
from sietch.models.rating import Rating  # noqa: F401
from sietch.models.user import User  # noqa: F401
