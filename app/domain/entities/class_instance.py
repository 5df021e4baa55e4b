from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ClassInstance:
    id: str
    template_id: str
    date: datetime
    teacher: str
    comments: str = ""
