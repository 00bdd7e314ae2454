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

"""Results of a submission, computed on demand from its build report.

Nothing here is stored: the raw build output is the only source, and
it is parsed again each time by the report builder.

"""

import logging
import typing
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass, field

from dropproject.db import Assignment, Indicator, Submission
from dropproject.submission.teacherfiles import TeacherFiles


logger = logging.getLogger(__name__)


class TestSummary(typing.NamedTuple):
    """Aggregated results of a test suite."""

    # Number of passed tests.
    progress: int
    total: int
    mandatory_ok: int = 0
    mandatory_total: int = 0


@dataclass
class ParsedReport:
    """What the report builder extracts from a build output."""

    tests: dict[Indicator, TestSummary] = field(default_factory=dict)
    # Time spent running the teacher tests, in seconds.
    elapsed: float | None = None
    # Line coverage of the student tests, in percent.
    coverage: float | None = None


class ReportBuilder(metaclass=ABCMeta):
    """Interface of the parser of build outputs."""

    @abstractmethod
    def build(self, output_lines: list[str], project_folder: str,
              assignment: Assignment,
              submission: Submission) -> ParsedReport:
        """Parse the output of the build of submission.

        output_lines: the build output.
        project_folder: the canonical tree that was built.
        assignment: the assignment of the submission.
        submission: the submission.

        """
        pass


@dataclass(frozen=True)
class SubmissionSummary:
    """The results of a submission as shown to teachers."""

    submission_id: int
    indicators: tuple[tuple[Indicator, str], ...]
    tests: dict[Indicator, TestSummary]
    elapsed: float | None
    coverage: float | None

    def get_indicator(self, indicator: Indicator) -> str | None:
        for key, value in self.indicators:
            if key == indicator:
                return value
        return None

    @property
    def teacher_tests(self) -> TestSummary | None:
        return self.tests.get(Indicator.TEACHER_UNIT_TESTS)

    @property
    def hidden_tests(self) -> TestSummary | None:
        return self.tests.get(Indicator.HIDDEN_UNIT_TESTS)

    @property
    def student_tests(self) -> TestSummary | None:
        return self.tests.get(Indicator.STUDENT_UNIT_TESTS)

    def only(self, *indicators: Indicator) -> "SubmissionSummary":
        """Return a copy showing only the given indicators."""
        return SubmissionSummary(
            self.submission_id,
            tuple((key, value) for key, value in self.indicators
                  if key in indicators),
            self.tests, self.elapsed, self.coverage)


def summarize(submission: Submission, report_builder: ReportBuilder,
              teacher_files: TeacherFiles) -> SubmissionSummary:
    """Compute the results of submission from its build report.

    Submissions without a build report (e.g. with structure errors)
    only have their indicators.

    """
    # A rebuild reports the indicators again; the latest value wins.
    latest: dict[Indicator, str] = {}
    for report in submission.reports:
        latest[report.indicator] = report.value
    indicators = tuple(latest.items())
    parsed = ParsedReport()
    if submission.build_report is not None:
        parsed = report_builder.build(
            submission.build_report.lines,
            teacher_files.get_project_folder(submission),
            submission.assignment, submission)

    coverage = parsed.coverage \
        if submission.assignment.calculate_student_tests_coverage else None
    return SubmissionSummary(submission.id, indicators, dict(parsed.tests),
                             parsed.elapsed, coverage)
