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

"""Report builder reading the JUnit XML files written by the Maven
surefire plugin, and the CSV summary of JaCoCo for coverage.

Test classes are told apart by their name: TestTeacherHidden* are
hidden tests, TestTeacher* teacher tests, Test* student tests.

"""

import csv
import glob
import logging
import os
import xml.etree.ElementTree as ET

from dropproject import TEACHER_TEST_PREFIX, TEST_PREFIX
from dropproject.db import Assignment, Indicator, Submission
from .summary import ParsedReport, ReportBuilder, TestSummary


logger = logging.getLogger(__name__)


HIDDEN_TEST_PREFIX = TEACHER_TEST_PREFIX + "Hidden"


def classify_test_class(class_name: str) -> Indicator | None:
    """Return the kind of tests in the class, None if not a test."""
    simple_name = class_name.rsplit(".", 1)[-1]
    if simple_name.startswith(HIDDEN_TEST_PREFIX):
        return Indicator.HIDDEN_UNIT_TESTS
    elif simple_name.startswith(TEACHER_TEST_PREFIX):
        return Indicator.TEACHER_UNIT_TESTS
    elif simple_name.startswith(TEST_PREFIX):
        return Indicator.STUDENT_UNIT_TESTS
    return None


class SurefireReportBuilder(ReportBuilder):
    """Read the results from the files left in the canonical tree by
    the build, the output lines are not needed.

    """

    REPORTS_FOLDER = os.path.join("target", "surefire-reports")
    COVERAGE_FILE = os.path.join("target", "site", "jacoco", "jacoco.csv")

    def build(self, output_lines, project_folder, assignment: Assignment,
              submission: Submission) -> ParsedReport:
        counts = {}
        elapsed = None
        pattern = os.path.join(project_folder, self.REPORTS_FOLDER,
                               "TEST-*.xml")
        for path in sorted(glob.glob(pattern)):
            try:
                root = ET.parse(path).getroot()
            except ET.ParseError:
                logger.warning("Ignoring malformed test report %s.", path)
                continue
            test_type = classify_test_class(root.attrib.get("name", ""))
            if test_type is None:
                continue
            if test_type == Indicator.TEACHER_UNIT_TESTS:
                elapsed = (elapsed or 0.0) \
                    + float(root.attrib.get("time", "0").replace(",", ""))
            self._count(counts.setdefault(test_type, [0, 0, 0, 0]),
                        root, assignment.mandatory_tests_suffix)

        return ParsedReport(
            tests={test_type: TestSummary(*values)
                   for test_type, values in counts.items()},
            elapsed=elapsed,
            coverage=self._coverage(project_folder))

    @staticmethod
    def _count(values: list[int], root, mandatory_suffix: str | None):
        for testcase in root.iter("testcase"):
            passed = all(testcase.find(tag) is None
                         for tag in ("failure", "error", "skipped"))
            mandatory = mandatory_suffix is not None \
                and testcase.attrib.get("name", "").endswith(mandatory_suffix)
            values[0] += passed
            values[1] += 1
            values[2] += passed and mandatory
            values[3] += mandatory

    def _coverage(self, project_folder: str) -> float | None:
        path = os.path.join(project_folder, self.COVERAGE_FILE)
        if not os.path.isfile(path):
            return None
        missed = covered = 0
        with open(path, "rt", encoding="utf-8", newline="") as coverage_file:
            for row in csv.DictReader(coverage_file):
                missed += int(row["LINE_MISSED"])
                covered += int(row["LINE_COVERED"])
        if missed + covered == 0:
            return None
        return round(100 * covered / (missed + covered))
