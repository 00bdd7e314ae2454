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

"""Ranking of the groups of an assignment by their latest submission.

"""

import logging
import typing

from dropproject.db import Assignment, Indicator, LeaderboardType, \
    Submission, get_submissions
from dropproject.db.submission import VALIDATED_STATUSES
from dropproject.errors import N_, AccessDenied
from dropproject.submission.teacherfiles import TeacherFiles
from .summary import ReportBuilder, SubmissionSummary, summarize


logger = logging.getLogger(__name__)


class LeaderboardEntry(typing.NamedTuple):
    submission: Submission
    summary: SubmissionSummary


def _sort_key(leaderboard_type: LeaderboardType):
    def progress(entry):
        return -entry.summary.teacher_tests.progress

    if leaderboard_type == LeaderboardType.ELAPSED_TIME:
        # Entries without an elapsed time go last among equals.
        return lambda entry: (
            progress(entry),
            entry.summary.elapsed is None,
            entry.summary.elapsed or 0)
    elif leaderboard_type == LeaderboardType.COVERAGE:
        return lambda entry: (progress(entry), -(entry.summary.coverage or 0))
    else:
        return progress


def latest_submissions(session, assignment: Assignment) -> list[Submission]:
    """Return the latest non-deleted submission of each group."""
    latest = {}
    for submission in get_submissions(session, assignment.id):
        latest[submission.group_id] = submission
    return list(latest.values())


def leaderboard(session, assignment: Assignment,
                report_builder: ReportBuilder,
                teacher_files: TeacherFiles) -> list[LeaderboardEntry]:
    """Return the ranking of the groups that pass some teacher test.

    Only the teacher tests indicator is kept in the returned summaries.

    raise (AccessDenied): if the assignment doesn't show a leaderboard.

    """
    if not assignment.show_leaderboard:
        raise AccessDenied(
            N_("The leaderboard of assignment %(assignment)s is not "
               "turned on."),
            {"assignment": assignment.id})

    entries = []
    for submission in latest_submissions(session, assignment):
        if submission.status not in VALIDATED_STATUSES:
            continue
        summary = summarize(submission, report_builder, teacher_files)
        teacher_tests = summary.teacher_tests
        if teacher_tests is None or teacher_tests.progress <= 0:
            continue
        entries.append(LeaderboardEntry(submission, summary))

    entries.sort(key=_sort_key(assignment.leaderboard_type
                               or LeaderboardType.TESTS_PASSED))
    return [LeaderboardEntry(entry.submission,
                             entry.summary.only(Indicator.TEACHER_UNIT_TESTS))
            for entry in entries]
