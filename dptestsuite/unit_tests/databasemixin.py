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

"""A unittest.TestCase mixin for tests interacting with the database.

This mixin will use the throwaway database configured in conftest.py,
recreating it for each testing class; it will also create a session at
each test setup.

The mixin also offers a series of get_<object> (to build an object, not
attached to any session) and add_<object> (to build and add the object
to the default session) methods. Without arguments, these will create
minimal objects with random values in the fields, and callers can
specify as many fields as they like.

When the object depends on a "parent" object, the caller can specify
it, or leave it for the function to create.

"""

from datetime import timedelta

from dropproject.db import engine, metadata, Assignment, Author, \
    BuildReport, GitSubmission, Indicator, ProjectGroup, Session, \
    Submission, SubmissionReport, SubmissionStatus, drop_db, init_db
from dpcommon.datetime import make_datetime
from dptestsuite.unit_tests.testidgenerator import unique_long_id, \
    unique_unicode_id, unique_user_id


class DatabaseObjectGeneratorMixin:
    """Mixin to create database objects without a session.

    This is to be preferred to DatabaseMixin when a session is not required, in
    order to save some initialization and cleanup time.

    The methods in this mixin are static (actually, class methods to allow
    overriding); we use a mixin to keep them together and avoid the need to
    import a lot of names.

    """

    @classmethod
    def get_assignment(cls, **kwargs):
        """Create an assignment"""
        args = {
            "id": "assignment%s" % unique_unicode_id(),
            "name": unique_unicode_id(),
            "owner_user_id": unique_user_id(),
            "package_name": "org.dropproject.sample",
            "active": True,
            "archived": False,
            "accepts_student_tests": False,
            "calculate_student_tests_coverage": False,
            "show_leaderboard": False,
        }
        args.update(kwargs)
        assignment = Assignment(**args)
        return assignment

    @classmethod
    def get_author(cls, **kwargs):
        """Create an author"""
        args = {
            "user_id": unique_user_id(),
            "name": unique_unicode_id(),
        }
        args.update(kwargs)
        author = Author(**args)
        return author

    @classmethod
    def get_group(cls, authors=None, **kwargs):
        """Create a group, of a single new author by default"""
        authors = authors if authors is not None else [cls.get_author()]
        args = {
            "authors": authors,
        }
        args.update(kwargs)
        group = ProjectGroup(**args)
        return group

    @classmethod
    def get_submission(cls, assignment=None, group=None, **kwargs):
        """Create a submission"""
        assignment = assignment if assignment is not None \
            else cls.get_assignment()
        group = group if group is not None else cls.get_group()
        timestamp = make_datetime() - timedelta(0, unique_long_id() % 86400)
        args = {
            "assignment": assignment,
            "group": group,
            "submitter_user_id": group.authors[0].user_id,
            "submission_date": timestamp,
            "status": SubmissionStatus.VALIDATED,
            "status_date": timestamp,
            "upload_folder": "%s/%s" % (assignment.id, unique_unicode_id()),
            "marked_as_final": False,
            "rebuilt": False,
        }
        args.update(kwargs)
        submission = Submission(**args)
        return submission

    @classmethod
    def get_submission_report(cls, submission=None, **kwargs):
        """Create a report of an indicator of a submission"""
        submission = submission if submission is not None \
            else cls.get_submission()
        args = {
            "submission": submission,
            "indicator": Indicator.PROJECT_STRUCTURE,
            "value": SubmissionReport.OK,
        }
        args.update(kwargs)
        report = SubmissionReport(**args)
        return report

    @classmethod
    def get_build_report(cls, **kwargs):
        """Create a build report"""
        args = {
            "build_report": unique_unicode_id(),
        }
        args.update(kwargs)
        build_report = BuildReport(**args)
        return build_report

    @classmethod
    def get_git_submission(cls, assignment=None, **kwargs):
        """Create the binding of a student to a repository"""
        assignment = assignment if assignment is not None \
            else cls.get_assignment()
        name = "repo%s" % unique_unicode_id()
        args = {
            "assignment": assignment,
            "submitter_user_id": unique_user_id(),
            "git_repository_url":
                "git@github.com:someuser/%s.git" % name,
            "git_repository_pub_key": "ssh-ed25519 AAAA%s" % name,
            "git_repository_priv_key": "PRIVATE %s" % name,
            "connected": False,
        }
        args.update(kwargs)
        git_submission = GitSubmission(**args)
        return git_submission


class DatabaseMixin(DatabaseObjectGeneratorMixin):
    """Mixin for tests with database access."""

    @classmethod
    def setUpClass(cls):
        super().setUpClass()
        assert "fortesting" in str(engine.url), \
            "Monkey patching of DB connection string failed"
        drop_db()
        init_db()

    @classmethod
    def tearDownClass(cls):
        drop_db()
        super().tearDownClass()

    def setUp(self):
        super().setUp()
        self.session = Session()

    def tearDown(self):
        self.session.rollback()
        self.session.close()
        super().tearDown()

    def delete_data(self):
        """Delete all the data in the DB.

        This is useful to call during tear down, for tests that rely on
        starting from a clean DB.

        """
        for table in reversed(metadata.sorted_tables):
            self.session.execute(table.delete())
        self.session.commit()

    def add_assignment(self, **kwargs):
        """Create an assignment and add it to the session"""
        assignment = self.get_assignment(**kwargs)
        self.session.add(assignment)
        return assignment

    def add_author(self, **kwargs):
        """Create an author and add it to the session"""
        author = self.get_author(**kwargs)
        self.session.add(author)
        return author

    def add_group(self, **kwargs):
        """Create a group and add it to the session"""
        group = self.get_group(**kwargs)
        self.session.add(group)
        return group

    def add_submission(self, **kwargs):
        """Create a submission and add it to the session"""
        submission = self.get_submission(**kwargs)
        self.session.add(submission)
        return submission

    def add_submission_report(self, **kwargs):
        """Create a submission report and add it to the session"""
        report = self.get_submission_report(**kwargs)
        self.session.add(report)
        return report

    def add_build_report(self, **kwargs):
        """Create a build report and add it to the session"""
        build_report = self.get_build_report(**kwargs)
        self.session.add(build_report)
        return build_report

    def add_git_submission(self, **kwargs):
        """Create a git submission and add it to the session"""
        git_submission = self.get_git_submission(**kwargs)
        self.session.add(git_submission)
        return git_submission
