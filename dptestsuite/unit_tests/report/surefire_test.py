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

"""Tests for the report builder reading surefire and JaCoCo files.

"""

import unittest
from unittest.mock import MagicMock

from dptestsuite.unit_tests.filesystemmixin import FileSystemMixin

from dropproject.db import Indicator
from dropproject.report import SurefireReportBuilder, classify_test_class
from dropproject.report.summary import TestSummary as Tests


def suite(name, time, testcases):
    cases = []
    for case_name, outcome in testcases:
        body = "" if outcome is None else "<%s message=\"x\"/>" % outcome
        cases.append("<testcase name=\"%s\" classname=\"%s\" time=\"0.1\">"
                     "%s</testcase>" % (case_name, name, body))
    return ("<?xml version=\"1.0\" encoding=\"UTF-8\"?>\n"
            "<testsuite name=\"%s\" time=\"%s\" tests=\"%d\">%s"
            "</testsuite>\n" % (name, time, len(testcases), "".join(cases)))


class TestClassifyTestClass(unittest.TestCase):

    def test_classify(self):
        self.assertIs(classify_test_class("org.dp.TestTeacherHiddenLogic"),
                      Indicator.HIDDEN_UNIT_TESTS)
        self.assertIs(classify_test_class("org.dp.TestTeacherLogic"),
                      Indicator.TEACHER_UNIT_TESTS)
        self.assertIs(classify_test_class("TestMine"),
                      Indicator.STUDENT_UNIT_TESTS)
        self.assertIsNone(classify_test_class("org.dp.Helper"))


class TestSurefireReportBuilder(FileSystemMixin, unittest.TestCase):

    def setUp(self):
        super().setUp()
        self.builder = SurefireReportBuilder()
        self.assignment = MagicMock()
        self.assignment.mandatory_tests_suffix = "_MANDATORY"

    def write_suite(self, name, time, testcases):
        self.write_file("target/surefire-reports/TEST-%s.xml" % name,
                        suite(name, time, testcases))

    def build(self):
        return self.builder.build([], self.base_dir, self.assignment,
                                  MagicMock())

    def test_counts(self):
        self.write_suite("org.dp.TestTeacherLogic", "1.5", [
            ("testSum_MANDATORY", None),
            ("testDiv_MANDATORY", "failure"),
            ("testMul", None),
        ])
        self.write_suite("org.dp.TestTeacherOther", "0.25", [
            ("testA", "error"),
            ("testB", "skipped"),
        ])
        self.write_suite("org.dp.TestTeacherHiddenLogic", "9.0", [
            ("testHidden", None),
        ])
        self.write_suite("org.dp.TestMine", "3.0", [
            ("testMine", None),
        ])

        report = self.build()

        self.assertEqual(report.tests, {
            Indicator.TEACHER_UNIT_TESTS: Tests(2, 5, 1, 2),
            Indicator.HIDDEN_UNIT_TESTS: Tests(1, 1, 0, 0),
            Indicator.STUDENT_UNIT_TESTS: Tests(1, 1, 0, 0),
        })
        self.assertAlmostEqual(report.elapsed, 1.75)
        self.assertIsNone(report.coverage)

    def test_no_reports(self):
        report = self.build()
        self.assertEqual(report.tests, {})
        self.assertIsNone(report.elapsed)

    def test_malformed_report_skipped(self):
        self.write_file("target/surefire-reports/TEST-broken.xml",
                        "<testsuite name=")
        self.write_suite("org.dp.TestTeacherLogic", "1", [("testA", None)])
        report = self.build()
        self.assertEqual(report.tests,
                         {Indicator.TEACHER_UNIT_TESTS: Tests(1, 1, 0, 0)})

    def test_without_mandatory_suffix(self):
        self.assignment.mandatory_tests_suffix = None
        self.write_suite("org.dp.TestTeacherLogic", "1", [
            ("testA_MANDATORY", None),
        ])
        report = self.build()
        self.assertEqual(report.tests[Indicator.TEACHER_UNIT_TESTS],
                         Tests(1, 1, 0, 0))

    def test_coverage(self):
        self.write_file(
            "target/site/jacoco/jacoco.csv",
            "GROUP,PACKAGE,CLASS,LINE_MISSED,LINE_COVERED\n"
            "p,org.dp,Main,10,20\n"
            "p,org.dp,Other,0,10\n")
        self.assertEqual(self.build().coverage, 75)

    def test_empty_coverage(self):
        self.write_file("target/site/jacoco/jacoco.csv",
                        "GROUP,PACKAGE,CLASS,LINE_MISSED,LINE_COVERED\n")
        self.assertIsNone(self.build().coverage)


if __name__ == "__main__":
    unittest.main()
