from dataclasses import dataclass


@dataclass(frozen=True)
class Organisation:
    id: int
    name: str
    api_key: str


@dataclass(frozen=True)
class Role:
    id: int
    organisation_id: int
    name: str
