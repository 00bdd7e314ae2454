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

"""Minimum interval between submissions.

"""

import logging
from datetime import datetime, timedelta

from sqlalchemy import select

from dropproject import config
from dropproject.db import Assignment, Author, ProjectGroup, Submission, \
    SubmissionStatus
from dpcommon.datetime import minutes_between


logger = logging.getLogger(__name__)


def next_allowed_submission_time(
    last_submission: Submission | None,
    assignment: Assignment,
    now: datetime,
    quick_retry: int | None = None,
) -> datetime | None:
    """Return when a new submission will be accepted, if not now.

    A submission that failed the project structure or the compilation
    is followed by the shorter of the assignment cool-off and the
    quick retry one.

    last_submission: the previous submission of the student, if any.
    assignment: the assignment being submitted to.
    now: the time of the new submission.
    quick_retry: cool-off in minutes after a structure or compilation
        failure; None for the configured one.

    return: the time from which a new submission is allowed, or None
        if it is allowed now.

    """
    if assignment.cooloff_period is None or last_submission is None:
        return None
    if quick_retry is None:
        quick_retry = config.submission.quick_retry_cooloff

    cooloff = assignment.cooloff_period
    if last_submission.failed_structure_or_compilation():
        cooloff = min(cooloff, quick_retry)

    elapsed = minutes_between(last_submission.submission_date, now)
    if elapsed < cooloff:
        return last_submission.submission_date + timedelta(minutes=cooloff)
    return None


def get_last_submission(session, assignment: Assignment,
                        user_id: str) -> Submission | None:
    """Return the latest non-deleted submission of any group user_id
    belongs to, whoever sent it.

    session (Session): the session to use.

    """
    return session.scalars(
        select(Submission)
        .join(Submission.group)
        .where(Submission.assignment_id == assignment.id,
               ProjectGroup.authors.any(Author.user_id == user_id),
               Submission.status != SubmissionStatus.DELETED)
        .order_by(Submission.submission_date.desc(), Submission.id.desc())
        .limit(1)).first()
