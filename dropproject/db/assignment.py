#!/usr/bin/env python3

# DropProject - submission processing pipeline
# Copyright © 2019-2024 The DropProject development team
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as
# published by the Free Software Foundation, either version 3 of the
# License, or (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

"""Assignment-related database interfaces for SQLAlchemy.

"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, \
    Integer, Unicode, UniqueConstraint, func, select
from sqlalchemy.orm import relationship, validates

from dropproject.errors import N_, PolicyViolation
from . import Base


class Language(enum.Enum):
    JAVA = "java"
    KOTLIN = "kotlin"

    @property
    def entry_point(self) -> str:
        """Name of the file with the main function."""
        return "Main.java" if self is Language.JAVA else "Main.kt"

    @property
    def source_folder(self) -> str:
        """Name of the folder below src/main and src/test."""
        return self.value


class SubmissionMethod(enum.Enum):
    UPLOAD = "upload"
    GIT = "git"


class LeaderboardType(enum.Enum):
    TESTS_PASSED = "tests_passed"
    ELAPSED_TIME = "elapsed_time"
    COVERAGE = "coverage"


class Assignment(Base):
    """Class to store an assignment.

    """
    __tablename__ = 'assignments'

    # The id is chosen by the teacher, and it is also the name of the
    # folder with the teacher files.
    id: str = Column(
        Unicode,
        primary_key=True)

    name: str = Column(
        Unicode,
        nullable=False)

    # User id of the teacher owning the assignment.
    owner_user_id: str = Column(
        Unicode,
        nullable=False)

    # Dot-separated package of the Main file, e.g. "org.dropproject".
    package_name: str | None = Column(
        Unicode,
        nullable=True)

    language: Language = Column(
        Enum(Language, name="language"),
        nullable=False,
        default=Language.JAVA)

    submission_method: SubmissionMethod = Column(
        Enum(SubmissionMethod, name="submission_method"),
        nullable=False,
        default=SubmissionMethod.UPLOAD)

    active: bool = Column(
        Boolean,
        nullable=False,
        default=False)

    archived: bool = Column(
        Boolean,
        nullable=False,
        default=False)

    due_date: datetime | None = Column(
        DateTime,
        nullable=True)

    # Minimum interval between submissions of the same student, in
    # minutes. None for no limit.
    cooloff_period: int | None = Column(
        Integer,
        nullable=True)

    accepts_student_tests: bool = Column(
        Boolean,
        nullable=False,
        default=False)

    calculate_student_tests_coverage: bool = Column(
        Boolean,
        nullable=False,
        default=False)

    # Teacher tests whose name ends with this suffix are mandatory.
    mandatory_tests_suffix: str | None = Column(
        Unicode,
        nullable=True)

    show_leaderboard: bool = Column(
        Boolean,
        nullable=False,
        default=False)

    leaderboard_type: LeaderboardType | None = Column(
        Enum(LeaderboardType, name="leaderboard_type"),
        nullable=True)

    acl: list["AssignmentACL"] = relationship(
        "AssignmentACL",
        cascade="all, delete-orphan",
        passive_deletes=True,
        back_populates="assignment")

    assignees: list["Assignee"] = relationship(
        "Assignee",
        cascade="all, delete-orphan",
        passive_deletes=True,
        back_populates="assignment")

    @property
    def package_path(self) -> list[str]:
        """Package name split in folder names."""
        if not self.package_name:
            return []
        return self.package_name.split(".")

    def has_submissions(self) -> bool:
        from .submission import Submission
        session = self.sa_session
        if session is None or self.id is None:
            return False
        return session.scalar(
            select(func.count(Submission.id))
            .where(Submission.assignment_id == self.id)) > 0

    @validates("submission_method")
    def validate_submission_method(self, key, value):
        if self.submission_method is not None \
                and value != self.submission_method \
                and self.has_submissions():
            raise PolicyViolation(
                N_("Invalid change"),
                N_("Cannot change the submission method of assignment "
                   "%(assignment)s, it already has submissions."),
                {"assignment": self.id})
        return value

    def is_teacher(self, user_id: str) -> bool:
        """Return whether user_id can manage this assignment."""
        return user_id == self.owner_user_id \
            or any(entry.user_id == user_id for entry in self.acl)

    def is_assigned_to(self, user_id: str) -> bool:
        """Return whether user_id can submit to this assignment.

        An assignment without assignees is open to everyone.

        """
        return len(self.assignees) == 0 \
            or any(entry.user_id == user_id for entry in self.assignees)

    def is_overdue(self, submission_date: datetime) -> bool:
        return self.due_date is not None and submission_date > self.due_date


class AssignmentACL(Base):
    """Teachers, besides the owner, allowed to manage an assignment.

    """
    __tablename__ = 'assignment_acl'
    __table_args__ = (
        UniqueConstraint('assignment_id', 'user_id'),
    )

    id: int = Column(
        Integer,
        primary_key=True)

    assignment_id: str = Column(
        Unicode,
        ForeignKey(Assignment.id,
                   onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
        index=True)
    assignment: Assignment = relationship(
        Assignment,
        back_populates="acl")

    user_id: str = Column(
        Unicode,
        nullable=False)


class Assignee(Base):
    """Students allowed to submit to an assignment.

    """
    __tablename__ = 'assignees'
    __table_args__ = (
        UniqueConstraint('assignment_id', 'user_id'),
    )

    id: int = Column(
        Integer,
        primary_key=True)

    assignment_id: str = Column(
        Unicode,
        ForeignKey(Assignment.id,
                   onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
        index=True)
    assignment: Assignment = relationship(
        Assignment,
        back_populates="assignees")

    user_id: str = Column(
        Unicode,
        nullable=False)
