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

"""Git repositories bound to an assignment.

"""

import re
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, \
    Unicode, UnicodeText, UniqueConstraint
from sqlalchemy.orm import relationship

from dpcommon.datetime import make_datetime
from . import Base, Assignment, ProjectGroup


class GitSubmission(Base):
    """The repository a student registered for an assignment.

    It is created by a single student and, once connected, is shared
    by the whole group listed in the AUTHORS.txt of the repository.

    """
    __tablename__ = 'git_submissions'
    __table_args__ = (
        UniqueConstraint('assignment_id', 'submitter_user_id'),
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
        Assignment)

    # The student who registered the repository; only they can reset
    # it.
    submitter_user_id: str = Column(
        Unicode,
        nullable=False)

    create_date: datetime = Column(
        DateTime,
        nullable=False,
        default=make_datetime)

    git_repository_url: str = Column(
        Unicode,
        nullable=False)

    git_repository_pub_key: str | None = Column(
        UnicodeText,
        nullable=True)

    git_repository_priv_key: str | None = Column(
        UnicodeText,
        nullable=True)

    connected: bool = Column(
        Boolean,
        nullable=False,
        default=False)

    last_commit_date: datetime | None = Column(
        DateTime,
        nullable=True)

    # Id of the last submission generated from this repository; reset
    # to None when new commits are fetched.
    last_submission_id: int | None = Column(
        Integer,
        nullable=True)

    # Known only after the first successful clone.
    group_id: int | None = Column(
        Integer,
        ForeignKey(ProjectGroup.id,
                   onupdate="CASCADE", ondelete="SET NULL"),
        nullable=True,
        index=True)
    group: ProjectGroup | None = relationship(
        ProjectGroup)

    @property
    def repository_name(self) -> str:
        """Last component of the url, without the ".git" suffix."""
        name = re.split(r"[/:]", self.git_repository_url.rstrip("/"))[-1]
        return name.removesuffix(".git")

    def get_folder_relative_to_storage_root(self) -> str:
        """Return where the working copy lives, relative to git_root."""
        return "%s/%d-%s" % (self.assignment_id, self.id,
                             self.repository_name)
