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

"""Tests for the database utilities.

"""

import unittest

# Needs to be first to allow for monkey patching the DB connection string.
from dptestsuite.unit_tests.databasemixin import DatabaseMixin

from dropproject.db import Author, SubmissionStatus, \
    get_or_create_project_group, get_submissions
from dropproject.submission import AuthorDetails
from dptestsuite.unit_tests.testidgenerator import unique_user_id


class TestGetOrCreateProjectGroup(DatabaseMixin, unittest.TestCase):

    def setUp(self):
        super().setUp()
        self.alice = AuthorDetails(unique_user_id(), "Alice")
        self.bob = AuthorDetails(unique_user_id(), "Bob")

    def test_creates_group_and_authors(self):
        group = get_or_create_project_group(self.session,
                                            [self.alice, self.bob])
        self.session.flush()
        self.assertIsNotNone(group.id)
        self.assertEqual(group.author_ids,
                         {self.alice.user_id, self.bob.user_id})

    def test_same_set_same_group(self):
        group = get_or_create_project_group(self.session,
                                            [self.alice, self.bob])
        self.session.flush()
        again = get_or_create_project_group(self.session,
                                            [self.bob, self.alice])
        self.assertIs(again, group)

    def test_subset_is_another_group(self):
        pair = get_or_create_project_group(self.session,
                                           [self.alice, self.bob])
        self.session.flush()
        single = get_or_create_project_group(self.session, [self.alice])
        self.session.flush()
        self.assertIsNot(single, pair)
        self.assertEqual(single.author_ids, {self.alice.user_id})
        # The author is shared, not duplicated.
        authors = self.session.query(Author)\
            .filter(Author.user_id == self.alice.user_id).all()
        self.assertEqual(len(authors), 1)

    def test_name_updated(self):
        get_or_create_project_group(self.session, [self.alice])
        self.session.flush()
        get_or_create_project_group(
            self.session, [AuthorDetails(self.alice.user_id, "Alice B.")])
        self.session.flush()
        author = self.session.query(Author)\
            .filter(Author.user_id == self.alice.user_id).one()
        self.assertEqual(author.name, "Alice B.")


class TestGetSubmissions(DatabaseMixin, unittest.TestCase):

    def test_filters(self):
        assignment = self.add_assignment()
        group = self.add_group()
        normal = self.add_submission(assignment=assignment, group=group)
        deleted = self.add_submission(assignment=assignment, group=group,
                                      status=SubmissionStatus.DELETED)
        final = self.add_submission(assignment=assignment, group=group,
                                    marked_as_final=True)
        self.add_submission(group=group)
        self.session.flush()

        self.assertCountEqual(
            get_submissions(self.session, assignment.id), [normal, final])
        self.assertCountEqual(
            get_submissions(self.session, assignment.id,
                            include_deleted=True),
            [normal, deleted, final])
        self.assertEqual(
            get_submissions(self.session, assignment.id, final_only=True),
            [final])

    def test_order(self):
        assignment = self.add_assignment()
        submissions = [self.add_submission(assignment=assignment)
                       for _ in range(4)]
        self.session.flush()
        expected = sorted(submissions, key=lambda s: s.submission_date)
        self.assertEqual(get_submissions(self.session, assignment.id),
                         expected)


if __name__ == "__main__":
    unittest.main()
