from dataclasses import dataclass
from typing import Optional

from .models import User


@dataclass
class UserSummaryDTO:
    id: str
    username: str
    email: str
    first_name: str
    last_name: str
    phone: Optional[str]


def user_to_summary_dto(u: User) -> UserSummaryDTO:
    return UserSummaryDTO(
        id=str(u.id),
        username=u.username,
        email=u.email,
        first_name=u.first_name,
        last_name=u.last_name,
        phone=u.phone,
    )
