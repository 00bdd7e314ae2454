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

"""Submission-related database interfaces for SQLAlchemy.

"""

import enum
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Enum, ForeignKey, \
    Integer, Unicode, UnicodeText
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from dpcommon.datetime import make_datetime
from . import Base, Assignment, ProjectGroup


class SubmissionStatus(enum.Enum):
    SUBMITTED = "S"
    SUBMITTED_FOR_REBUILD = "SR"
    REBUILDING = "R"
    VALIDATED = "V"
    VALIDATED_REBUILT = "VR"
    FAILED = "F"
    ABORTED_BY_TIMEOUT = "AT"
    TOO_MUCH_OUTPUT = "TO"
    ILLEGAL_ACCESS = "IA"
    DELETED = "D"

    @property
    def in_flight(self) -> bool:
        """Whether a build of the submission is expected to report back."""
        return self in IN_FLIGHT_STATUSES


IN_FLIGHT_STATUSES = frozenset({
    SubmissionStatus.SUBMITTED,
    SubmissionStatus.SUBMITTED_FOR_REBUILD,
    SubmissionStatus.REBUILDING,
})

VALIDATED_STATUSES = frozenset({
    SubmissionStatus.VALIDATED,
    SubmissionStatus.VALIDATED_REBUILT,
})


class Indicator(enum.Enum):
    PROJECT_STRUCTURE = "PS"
    COMPILATION = "C"
    CHECKSTYLE = "CS"
    STUDENT_UNIT_TESTS = "SU"
    TEACHER_UNIT_TESTS = "TT"
    HIDDEN_UNIT_TESTS = "HT"


class BuildReport(Base):
    """Raw output of the build of a submission, never changed once
    written.

    """
    __tablename__ = 'build_reports'

    id: int = Column(
        Integer,
        primary_key=True)

    build_report: str = Column(
        UnicodeText,
        nullable=False)

    @property
    def lines(self) -> list[str]:
        return self.build_report.splitlines()


class Submission(Base):
    """Class to store a submission.

    """
    __tablename__ = 'submissions'

    # Auto increment primary key.
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
        Assignment)

    group_id: int = Column(
        Integer,
        ForeignKey(ProjectGroup.id,
                   onupdate="CASCADE", ondelete="RESTRICT"),
        nullable=False,
        index=True)
    group: ProjectGroup = relationship(
        ProjectGroup)

    # User id of the author who sent it.
    submitter_user_id: str = Column(
        Unicode,
        nullable=False)

    submission_date: datetime = Column(
        DateTime,
        nullable=False)

    status: SubmissionStatus = Column(
        Enum(SubmissionStatus, name="submission_status"),
        nullable=False,
        default=SubmissionStatus.SUBMITTED)

    status_date: datetime = Column(
        DateTime,
        nullable=False,
        default=make_datetime)

    # Name of the folder (and of the zip file) of the raw upload in the
    # upload root; None for git submissions.
    upload_folder: str | None = Column(
        Unicode,
        nullable=True)

    git_submission_id: int | None = Column(
        Integer,
        ForeignKey('git_submissions.id',
                   onupdate="CASCADE", ondelete="SET NULL"),
        nullable=True,
        index=True)
    git_submission: "GitSubmission | None" = relationship(
        "GitSubmission",
        foreign_keys=[git_submission_id])

    build_report_id: int | None = Column(
        Integer,
        ForeignKey(BuildReport.id,
                   onupdate="CASCADE", ondelete="SET NULL"),
        nullable=True)
    build_report: BuildReport | None = relationship(
        BuildReport)

    # List of structure error messages.
    structure_errors_data: list[str] | None = Column(
        JSON(none_as_null=True).with_variant(JSONB(none_as_null=True),
                                             "postgresql"),
        nullable=True)

    marked_as_final: bool = Column(
        Boolean,
        nullable=False,
        default=False)

    # Whether this submission was created by a full rebuild: its
    # canonical tree lives apart from the one of the original.
    rebuilt: bool = Column(
        Boolean,
        nullable=False,
        default=False)

    reports: list["SubmissionReport"] = relationship(
        "SubmissionReport",
        order_by="SubmissionReport.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
        back_populates="submission")

    @property
    def structure_errors(self) -> list[str]:
        return list(self.structure_errors_data or [])

    @structure_errors.setter
    def structure_errors(self, errors: list[str]):
        self.structure_errors_data = list(errors) if errors else None

    def set_status(self, status: SubmissionStatus,
                   preserve_status_date: bool = False,
                   timestamp: datetime | None = None):
        """Change the status, updating its date unless asked not to.

        status: the new status.
        preserve_status_date: if True, the status date stays the one
            of the previous status.
        timestamp: the date of the change, None for now.

        """
        self.status = status
        if not preserve_status_date or self.status_date is None:
            self.status_date = timestamp if timestamp is not None \
                else make_datetime()

    def add_report(self, indicator: "Indicator", value: str):
        self.reports.append(
            SubmissionReport(indicator=indicator, value=value))

    def get_report(self, indicator: "Indicator") -> str | None:
        """Return the last value reported for indicator, or None."""
        value = None
        for report in self.reports:
            if report.indicator == indicator:
                value = report.value
        return value

    def failed_structure_or_compilation(self) -> bool:
        return self.get_report(Indicator.PROJECT_STRUCTURE) == \
            SubmissionReport.NOK \
            or self.get_report(Indicator.COMPILATION) == SubmissionReport.NOK

    def is_git(self) -> bool:
        return self.upload_folder is None

    def clone_for_rebuild(self) -> "Submission":
        """Return a new submission for the same delivery, to be rebuilt.

        The clone keeps the group, the raw sources and the submission
        date, but none of the evaluation results.

        """
        return Submission(
            assignment_id=self.assignment_id,
            group=self.group,
            submitter_user_id=self.submitter_user_id,
            submission_date=self.submission_date,
            upload_folder=self.upload_folder,
            git_submission_id=self.git_submission_id,
            status=SubmissionStatus.SUBMITTED_FOR_REBUILD,
            status_date=make_datetime(),
            marked_as_final=False,
            rebuilt=True)


class SubmissionReport(Base):
    """One indicator computed while evaluating a submission.

    """
    __tablename__ = 'submission_reports'

    OK = "OK"
    NOK = "NOK"

    id: int = Column(
        Integer,
        primary_key=True)

    submission_id: int = Column(
        Integer,
        ForeignKey(Submission.id,
                   onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
        index=True)
    submission: Submission = relationship(
        Submission,
        back_populates="reports")

    indicator: Indicator = Column(
        Enum(Indicator, name="indicator"),
        nullable=False)

    value: str = Column(
        Unicode,
        nullable=False)
