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

"""Export of the final results of an assignment as CSV.

"""

import csv
import io
import logging
from datetime import tzinfo
from decimal import ROUND_UP, Decimal

from dpcommon.datetime import format_datetime, local_tz
from dropproject.db import Assignment, Indicator, get_submissions
from dropproject.submission.check import get_submission_count
from dropproject.submission.teacherfiles import TeacherFiles
from .summary import ReportBuilder, summarize


logger = logging.getLogger(__name__)


BASE_COLUMNS = ["submission id", "student id", "student name",
                "project structure", "compilation", "code quality"]


def format_elapsed(elapsed: float | None) -> str:
    """Return elapsed rounded up to hundredths, or "" if missing."""
    if elapsed is None:
        return ""
    return str(Decimal(str(elapsed)).quantize(Decimal("0.01"),
                                              rounding=ROUND_UP))


def _progress(test_summary) -> str:
    return "" if test_summary is None else str(test_summary.progress)


def export_csv(session, assignment: Assignment,
               report_builder: ReportBuilder, teacher_files: TeacherFiles,
               include_elapsed: bool = False,
               tz: tzinfo = local_tz) -> str:
    """Return the results of the final submissions of assignment.

    There is one row per author of each final submission. The optional
    columns are decided looking at all the submissions before writing
    any row: student tests if the assignment accepts them, teacher and
    hidden tests if at least one submission has them, coverage if the
    assignment computes it, elapsed time if include_elapsed.

    """
    submissions = get_submissions(session, assignment.id, final_only=True)
    summaries = [summarize(submission, report_builder, teacher_files)
                 for submission in submissions]

    has_teacher_tests = any(s.teacher_tests is not None for s in summaries)
    has_hidden_tests = any(s.hidden_tests is not None for s in summaries)

    # Columns are collected while writing the rows, in order of first
    # appearance.
    header = dict.fromkeys(BASE_COLUMNS)
    rows = []
    for submission, summary in zip(submissions, summaries):
        indicators = [summary.get_indicator(indicator) or "" for indicator
                      in (Indicator.PROJECT_STRUCTURE,
                          Indicator.COMPILATION,
                          Indicator.CHECKSTYLE)]

        for author in submission.group.authors:
            row = [str(submission.id), author.user_id, author.name]
            row.extend(indicators)

            if assignment.accepts_student_tests:
                header["student tests"] = None
                row.append(_progress(summary.student_tests))
            if has_teacher_tests:
                header["teacher tests"] = None
                row.append(_progress(summary.teacher_tests))
            if has_hidden_tests:
                header["hidden tests"] = None
                row.append(_progress(summary.hidden_tests))
            if assignment.calculate_student_tests_coverage:
                header["coverage"] = None
                row.append("" if summary.coverage is None
                           else "%g" % summary.coverage)
            if include_elapsed:
                header["ellapsed"] = None
                row.append(format_elapsed(summary.elapsed))

            header["submission date"] = None
            row.append(format_datetime(submission.submission_date, tz))
            header["# submissions"] = None
            row.append(str(get_submission_count(
                session, assignment, author.user_id)))

            if assignment.mandatory_tests_suffix is not None:
                header["# mandatory"] = None
                teacher_tests = summary.teacher_tests
                row.append(str(teacher_tests.mandatory_ok
                               if teacher_tests is not None else 0))

            header["overdue"] = None
            row.append(
                "true" if assignment.is_overdue(submission.submission_date)
                else "false")
            rows.append(row)

    output = io.StringIO()
    writer = csv.writer(output, delimiter=";", lineterminator="\n")
    writer.writerow(list(header))
    writer.writerows(rows)

    logger.info("Exported %d rows for %d final submissions of "
                "assignment %s.", len(rows), len(submissions), assignment.id)
    return output.getvalue()
