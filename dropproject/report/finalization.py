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

"""Choice of the submission to grade for each group.

"""

import logging
import os

from sqlalchemy import select

from dropproject import rmtree
from dropproject.db import Assignment, Submission, SubmissionStatus, \
    get_group_lock, get_submissions
from dropproject.errors import N_, PolicyViolation
from dropproject.submission.teacherfiles import TeacherFiles


logger = logging.getLogger(__name__)


def mark_as_final(session, submission_id: int) -> bool:
    """Toggle the final flag of a submission.

    Marking a submission as final unmarks any other submission of the
    same group for the same assignment, in the same transaction; the
    group row is locked meanwhile.

    return: the new value of the flag.

    raise (EntityNotFound): if the submission doesn't exist.
    raise (PolicyViolation): if the submission was deleted.

    """
    submission = Submission.lookup(session, submission_id).unwrap()
    if submission.status is SubmissionStatus.DELETED:
        raise PolicyViolation(
            N_("Invalid operation"),
            N_("Submission %(id)d was deleted."),
            {"id": submission.id})
    get_group_lock(session, submission.group)

    if submission.marked_as_final:
        submission.marked_as_final = False
    else:
        others = session.scalars(
            select(Submission)
            .where(Submission.group_id == submission.group_id,
                   Submission.assignment_id == submission.assignment_id,
                   Submission.id != submission.id,
                   Submission.marked_as_final.is_(True)))
        for other in others:
            other.marked_as_final = False
        submission.marked_as_final = True
    session.commit()

    logger.info("Submission %d is %s final.", submission.id,
                "now" if submission.marked_as_final else "no longer")
    return submission.marked_as_final


def cleanup_non_final(session, assignment: Assignment,
                      teacher_files: TeacherFiles) -> int:
    """Delete the canonical trees of the submissions not marked final.

    The records are kept; only a full rebuild can build them again.

    return: the number of trees deleted.

    """
    removed = 0
    for submission in get_submissions(session, assignment.id,
                                      include_deleted=True):
        if submission.marked_as_final:
            continue
        folder = teacher_files.get_project_folder(submission)
        try:
            if os.path.isdir(folder):
                rmtree(folder)
                removed += 1
        except OSError:
            logger.warning("Couldn't delete %s.", folder, exc_info=True)
    logger.info("Deleted %d canonical trees of assignment %s.",
                removed, assignment.id)
    return removed
