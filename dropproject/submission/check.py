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

"""Checks run before accepting a submission.

"""

import logging
from datetime import datetime

from sqlalchemy import func, select

from dropproject.db import Assignment, ProjectGroup, Submission, \
    SubmissionStatus
from dropproject.errors import N_, AccessDenied
from .cooloff import get_last_submission, next_allowed_submission_time


logger = logging.getLogger(__name__)


def _filter_submission_query(query, group: ProjectGroup,
                             assignment: Assignment):
    return query.where(Submission.group_id == group.id,
                       Submission.assignment_id == assignment.id,
                       Submission.status != SubmissionStatus.DELETED)


def get_submission_count(session, assignment: Assignment,
                         user_id: str) -> int:
    """Return the number of submissions user_id sent to assignment.

    Deleted submissions and those created by full rebuilds are not
    counted.

    """
    return session.scalar(
        select(func.count(Submission.id))
        .where(Submission.assignment_id == assignment.id,
               Submission.submitter_user_id == user_id,
               Submission.rebuilt.is_(False),
               Submission.status != SubmissionStatus.DELETED))


def has_pending_submission(session, group: ProjectGroup,
                           assignment: Assignment) -> bool:
    """Return whether group has a submission still waiting for its
    first build.

    The caller should hold the group lock (see get_group_lock) for the
    answer to stay true until the end of the transaction.

    """
    return session.scalar(
        _filter_submission_query(select(func.count(Submission.id)),
                                 group, assignment)
        .where(Submission.status == SubmissionStatus.SUBMITTED)) > 0


def check_cooloff(session, assignment: Assignment, user_id: str,
                  timestamp: datetime) -> datetime | None:
    """Return when user_id may submit again, or None if now is fine.

    """
    last_submission = get_last_submission(session, assignment, user_id)
    return next_allowed_submission_time(last_submission, assignment,
                                        timestamp)


def is_accepting_submissions(assignment: Assignment, user_id: str) -> bool:
    """Return whether a student can submit to assignment at all."""
    return assignment.active and not assignment.archived \
        and assignment.is_assigned_to(user_id)


def check_assignment_access(assignment: Assignment, user_id: str):
    """Make sure user_id is a teacher of assignment.

    raise (AccessDenied): if they are not.

    """
    if not assignment.is_teacher(user_id):
        logger.warning("User %s tried to manage assignment %s.",
                       user_id, assignment.id)
        raise AccessDenied(
            N_("You are not allowed to manage assignment %(assignment)s."),
            {"assignment": assignment.id})
