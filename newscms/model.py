"""Response bodies of the system endpoints."""

from dataclasses import asdict, dataclass


@dataclass
class SystemHealthResp:
    db_online: bool

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SystemTimeResp:
    current_time_unix: int

    def to_dict(self) -> dict:
        return asdict(self)