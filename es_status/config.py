from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Tuple

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 9200


class CheckName(Enum):
    """the checks es-status knows about, in the order they always run"""

    HEALTH = "health"
    NODE = "node"
    SEGMENTS = "segments"
    SETTINGS = "settings"


def select_checks(requested=(), run_all=False):
    """
    turn the check flags into the tuple of checks to run

    order follows CheckName declaration, not the order flags were given,
    and health is the default when nothing was asked for
    """
    wanted = {CheckName(name) for name in requested}
    if run_all:
        wanted = set(CheckName)
    selected = tuple(check for check in CheckName if check in wanted)
    return selected or (CheckName.HEALTH,)


@dataclass(frozen=True)
class Config:
    checks: Tuple[CheckName, ...] = (CheckName.HEALTH,)
    color: bool = False
    nicolai: bool = False
    verbose: int = 0
    debug: bool = False
    kv_separator: str = ":"
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    progress: bool = False
    base_url: str = field(init=False)

    def __post_init__(self):
        if not self.checks:
            raise ValueError("at least one check has to be selected")
        if self.verbose < 0:
            raise ValueError("verbose level must not be negative")
        object.__setattr__(self, "base_url", "http://{}:{}".format(self.host, self.port))

    def as_dict(self):
        data = asdict(self)
        data["checks"] = [check.value for check in self.checks]
        return data
