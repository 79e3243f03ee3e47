from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class Client:
    name: str
    id: UUID = field(default_factory=uuid4)
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    currency: str = "USD"
    notes: str = ""
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    @property
    def address_lines(self) -> list[str]:
        locality = " ".join(p for p in (self.state, self.zip_code) if p)
        city_line = ", ".join(p for p in (self.city, locality) if p)
        return [line for line in (self.address, city_line, self.country) if line]

    def touch(self) -> None:
        self.updated_at = _utc_now()


@dataclass
class Contact:
    client_id: UUID
    name: str
    id: UUID = field(default_factory=uuid4)
    email: str | None = None
    phone: str | None = None
    position: str | None = None
    is_primary: bool = False
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    def touch(self) -> None:
        self.updated_at = _utc_now()


@dataclass
class Project:
    client_id: UUID
    title: str
    id: UUID = field(default_factory=uuid4)
    description: str | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    def touch(self) -> None:
        self.updated_at = _utc_now()

    def archive(self) -> None:
        self.is_active = False
        self.updated_at = _utc_now()

    def unarchive(self) -> None:
        self.is_active = True
        self.updated_at = _utc_now()


__all__ = ["Client", "Contact", "Project"]
