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

"""Tests for the submission model.

"""

import unittest
from datetime import datetime

# Needs to be first to allow for monkey patching the DB connection string.
from dptestsuite.unit_tests.databasemixin import DatabaseMixin

from dropproject.db import Indicator, SubmissionMethod, SubmissionReport, \
    SubmissionStatus
from dropproject.errors import PolicyViolation


class TestSubmission(DatabaseMixin, unittest.TestCase):

    def test_structure_errors(self):
        submission = self.get_submission()
        self.assertEqual(submission.structure_errors, [])
        submission.structure_errors = ["first", "second"]
        self.assertEqual(submission.structure_errors, ["first", "second"])
        submission.structure_errors = []
        self.assertIsNone(submission.structure_errors_data)

    def test_structure_errors_stored(self):
        # Messages quote file names, which can contain any character.
        errors = ["Reserved file: a;b.java", "Missing Main.java"]
        submission = self.add_submission()
        submission.structure_errors = errors
        self.session.commit()
        self.session.expire_all()
        self.assertEqual(submission.structure_errors, errors)

        submission.structure_errors = []
        self.session.commit()
        self.session.expire_all()
        self.assertEqual(submission.structure_errors, [])
        self.delete_data()

    def test_set_status(self):
        old = datetime(2024, 1, 1, 10, 0, 0)
        new = datetime(2024, 1, 2, 10, 0, 0)
        submission = self.get_submission(status_date=old)
        submission.set_status(SubmissionStatus.REBUILDING,
                              preserve_status_date=True, timestamp=new)
        self.assertIs(submission.status, SubmissionStatus.REBUILDING)
        self.assertEqual(submission.status_date, old)
        submission.set_status(SubmissionStatus.VALIDATED, timestamp=new)
        self.assertEqual(submission.status_date, new)

    def test_in_flight(self):
        self.assertTrue(SubmissionStatus.SUBMITTED.in_flight)
        self.assertTrue(SubmissionStatus.SUBMITTED_FOR_REBUILD.in_flight)
        self.assertTrue(SubmissionStatus.REBUILDING.in_flight)
        self.assertFalse(SubmissionStatus.VALIDATED.in_flight)
        self.assertFalse(SubmissionStatus.DELETED.in_flight)

    def test_reports(self):
        submission = self.add_submission()
        submission.add_report(Indicator.PROJECT_STRUCTURE,
                              SubmissionReport.OK)
        submission.add_report(Indicator.COMPILATION, SubmissionReport.NOK)
        self.session.flush()
        self.assertEqual(submission.get_report(Indicator.COMPILATION),
                         SubmissionReport.NOK)
        self.assertIsNone(submission.get_report(Indicator.CHECKSTYLE))
        self.assertTrue(submission.failed_structure_or_compilation())

    def test_clone_for_rebuild(self):
        submission = self.add_submission(marked_as_final=True)
        submission.add_report(Indicator.PROJECT_STRUCTURE,
                              SubmissionReport.OK)
        self.session.flush()
        clone = submission.clone_for_rebuild()
        self.assertIs(clone.group, submission.group)
        self.assertEqual(clone.submission_date, submission.submission_date)
        self.assertEqual(clone.upload_folder, submission.upload_folder)
        self.assertIs(clone.status, SubmissionStatus.SUBMITTED_FOR_REBUILD)
        self.assertTrue(clone.rebuilt)
        self.assertFalse(clone.marked_as_final)
        self.assertEqual(clone.reports, [])


class TestAssignment(DatabaseMixin, unittest.TestCase):

    def test_change_method_without_submissions(self):
        assignment = self.add_assignment()
        self.session.flush()
        assignment.submission_method = SubmissionMethod.GIT
        self.assertIs(assignment.submission_method, SubmissionMethod.GIT)

    def test_change_method_with_submissions(self):
        assignment = self.add_assignment(
            submission_method=SubmissionMethod.UPLOAD)
        self.add_submission(assignment=assignment)
        self.session.flush()
        with self.assertRaises(PolicyViolation):
            assignment.submission_method = SubmissionMethod.GIT

    def test_is_overdue(self):
        assignment = self.get_assignment()
        date = datetime(2024, 1, 1, 10, 0, 0)
        self.assertFalse(assignment.is_overdue(date))
        assignment.due_date = datetime(2024, 1, 1, 9, 0, 0)
        self.assertTrue(assignment.is_overdue(date))
        assignment.due_date = datetime(2024, 1, 1, 11, 0, 0)
        self.assertFalse(assignment.is_overdue(date))

    def test_package_path(self):
        self.assertEqual(
            self.get_assignment(package_name="org.x.y").package_path,
            ["org", "x", "y"])
        self.assertEqual(
            self.get_assignment(package_name=None).package_path, [])


if __name__ == "__main__":
    unittest.main()
