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

"""Tests for the choice of the final submissions.

"""

import os
import unittest

# Needs to be first to allow for monkey patching the DB connection string.
from dptestsuite.unit_tests.databasemixin import DatabaseMixin
from dptestsuite.unit_tests.filesystemmixin import FileSystemMixin

from dropproject.db import Submission, SubmissionStatus
from dropproject.errors import EntityNotFound, PolicyViolation
from dropproject.report import cleanup_non_final, mark_as_final
from dropproject.submission import TeacherFiles


class TestMarkAsFinal(DatabaseMixin, unittest.TestCase):

    def setUp(self):
        super().setUp()
        self.assignment = self.add_assignment()
        self.group = self.add_group()
        self.first = self.add_submission(assignment=self.assignment,
                                         group=self.group)
        self.second = self.add_submission(assignment=self.assignment,
                                          group=self.group)
        self.session.commit()

    def tearDown(self):
        self.delete_data()
        super().tearDown()

    def final_flags(self):
        self.session.expire_all()
        return self.first.marked_as_final, self.second.marked_as_final

    def test_mark(self):
        self.assertTrue(mark_as_final(self.session, self.first.id))
        self.assertEqual(self.final_flags(), (True, False))

    def test_only_one_final_per_group(self):
        mark_as_final(self.session, self.first.id)
        self.assertTrue(mark_as_final(self.session, self.second.id))
        self.assertEqual(self.final_flags(), (False, True))

    def test_toggle(self):
        mark_as_final(self.session, self.first.id)
        mark_as_final(self.session, self.second.id)
        self.assertFalse(mark_as_final(self.session, self.second.id))
        self.assertEqual(self.final_flags(), (False, False))

    def test_other_groups_untouched(self):
        other = self.add_submission(assignment=self.assignment,
                                    marked_as_final=True)
        other_assignment = self.add_submission(group=self.group,
                                               marked_as_final=True)
        self.session.commit()

        mark_as_final(self.session, self.first.id)

        self.session.expire_all()
        self.assertTrue(other.marked_as_final)
        self.assertTrue(other_assignment.marked_as_final)

    def test_deleted(self):
        self.first.set_status(SubmissionStatus.DELETED)
        self.session.commit()
        with self.assertRaises(PolicyViolation):
            mark_as_final(self.session, self.first.id)
        self.assertEqual(self.final_flags(), (False, False))

    def test_unknown_submission(self):
        with self.assertRaises(EntityNotFound):
            mark_as_final(self.session, 987654321)


class TestCleanupNonFinal(DatabaseMixin, FileSystemMixin,
                          unittest.TestCase):

    def setUp(self):
        super().setUp()
        self.teacher_files = TeacherFiles(self.makedirs("assignments"),
                                          self.makedirs("mavenized"))
        self.assignment = self.add_assignment()

    def tearDown(self):
        self.delete_data()
        super().tearDown()

    def add_with_tree(self, **kwargs):
        submission = self.add_submission(assignment=self.assignment,
                                         **kwargs)
        self.session.flush()
        folder = self.teacher_files.get_project_folder(submission)
        os.makedirs(folder)
        return submission, folder

    def test_cleanup(self):
        final, final_folder = self.add_with_tree(marked_as_final=True)
        other, other_folder = self.add_with_tree()
        deleted, deleted_folder = self.add_with_tree(
            status=SubmissionStatus.DELETED)
        # Without a tree.
        self.add_submission(assignment=self.assignment)
        self.session.commit()

        removed = cleanup_non_final(self.session, self.assignment,
                                    self.teacher_files)

        self.assertEqual(removed, 2)
        self.assertTrue(os.path.isdir(final_folder))
        self.assertFalse(os.path.exists(other_folder))
        self.assertFalse(os.path.exists(deleted_folder))
        # The records are kept.
        self.assertTrue(Submission.lookup(self.session, other.id))
        self.assertTrue(Submission.lookup(self.session, deleted.id))


if __name__ == "__main__":
    unittest.main()
