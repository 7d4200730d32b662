from typing import Optional

from pydantic import BaseModel
from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Team(Base):
    __tablename__ = "team"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    members = relationship("Member", back_populates="team")

    def __init__(self, name: str, id: Optional[int] = None):
        self.name = name
        self.id = id

    def __repr__(self):
        return f"Team(id={self.id}, name={self.name!r})"


class Member(Base):
    __tablename__ = "member"
    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, nullable=False, index=True)
    age = Column(Integer, nullable=False, default=0)
    team_id = Column(Integer, ForeignKey("team.id"))
    # lazy loading unless a query asks for the team explicitly
    team = relationship("Team", back_populates="members", lazy="select")

    def __init__(self, username: str, age: int = 0, team: Optional[Team] = None, id: Optional[int] = None):
        self.username = username
        self.age = age
        self.id = id
        if team is not None:
            self.change_team(team)

    def change_team(self, team: Team):
        """Move the member to a team. ``back_populates`` keeps ``team.members`` in sync."""
        self.team = team

    def __repr__(self):
        return f"Member(id={self.id}, username={self.username!r}, age={self.age})"


class MemberDto(BaseModel):
    id: int
    username: str
    team_name: Optional[str] = None

    @classmethod
    def from_member(cls, member: Member) -> "MemberDto":
        return cls(id=member.id, username=member.username, team_name=member.team.name if member.team else None)
