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

"""Tests for the intake, rebuild and deletion of submissions.

"""

import io
import os
import unittest
import zipfile
from datetime import timedelta
from unittest.mock import MagicMock, patch

# Needs to be first to allow for monkey patching the DB connection string.
from dptestsuite.unit_tests.databasemixin import DatabaseMixin

from dropproject import config
from dropproject.db import Indicator, Submission, SubmissionMethod, \
    SubmissionReport, SubmissionStatus
from dropproject.errors import AssignmentInactive, \
    AuthorsManifestMissing, CooloffActive, EntityNotFound, \
    NotAGroupMember, PendingSubmission, PolicyViolation, StorageFailed, \
    TransformationFailed, ValidationError, WrongSubmissionMethod
from dropproject.service import FileSystemStorage
from dropproject.submission import TeacherFiles, accept_git_submission, \
    accept_upload, delete_submission, rebuild, rebuild_full
from dpcommon.datetime import make_datetime
from dptestsuite.unit_tests.filesystemmixin import FileSystemMixin
from dptestsuite.unit_tests.testidgenerator import unique_user_id


PACKAGE = "org/dropproject/sample"


def make_project(authors, main=True):
    files = {"AUTHORS.txt": "\n".join("%s;Student %s" % (user_id, user_id)
                                      for user_id in authors)}
    if main:
        files["src/%s/Main.java" % PACKAGE] = "class Main {}"
    else:
        files["src/%s/Other.java" % PACKAGE] = "class Other {}"
    return files


class WorkflowTestMixin(DatabaseMixin, FileSystemMixin):

    def setUp(self):
        super().setUp()
        self.storage = FileSystemStorage(self.get_path("upload"),
                                         self.get_path("git"))
        self.teacher_files = TeacherFiles(self.get_path("assignments"),
                                          self.get_path("mavenized"))
        self.build_service = MagicMock()
        self.user_id = unique_user_id()
        self.partner_id = unique_user_id()
        self.timestamp = make_datetime()

    def tearDown(self):
        self.session.rollback()
        self.delete_data()
        super().tearDown()

    def write_zip(self, files, name="project.zip"):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zip_file:
            for path, content in files.items():
                zip_file.writestr(path, content)
        return self.write_file(name, buffer.getvalue())

    def count_submissions(self):
        return self.session.query(Submission)\
            .filter(Submission.assignment_id == self.assignment.id).count()


class TestAcceptUpload(WorkflowTestMixin, unittest.TestCase):

    def setUp(self):
        super().setUp()
        self.assignment = self.add_assignment(
            package_name="org.dropproject.sample")
        self.session.commit()
        self.upload = self.write_zip(
            make_project([self.user_id, self.partner_id]))

    def call(self, upload=None, user_id=None, timestamp=None, **kwargs):
        return accept_upload(
            self.session, self.storage, self.build_service,
            self.teacher_files, self.assignment.id,
            user_id if user_id is not None else self.user_id,
            upload if upload is not None else self.upload,
            timestamp if timestamp is not None else self.timestamp,
            **kwargs)

    def test_success(self):
        submission = self.call()
        self.assertIs(submission.status, SubmissionStatus.SUBMITTED)
        self.assertEqual(submission.group.author_ids,
                         {self.user_id, self.partner_id})
        self.assertEqual(submission.submitter_user_id, self.user_id)
        self.assertEqual(submission.get_report(Indicator.PROJECT_STRUCTURE),
                         SubmissionReport.OK)
        self.assertTrue(submission.upload_folder.startswith(
            self.assignment.id + "/"))

        tree = self.teacher_files.get_project_folder(submission)
        self.assertTrue(os.path.isfile(os.path.join(
            tree, "src", "main", "java", PACKAGE, "Main.java")))
        # The raw folder is gone, the archive is kept.
        raw = self.storage.get_upload_folder(submission)
        self.assertFalse(os.path.exists(raw))
        self.assertTrue(os.path.isfile(raw + ".zip"))

        self.build_service.dispatch.assert_called_once_with(
            submission, tree, "%s|%s" % (self.user_id, self.partner_id))

    def test_structure_errors(self):
        upload = self.write_zip(make_project([self.user_id], main=False),
                                "broken.zip")
        submission = self.call(upload=upload)
        self.assertIs(submission.status, SubmissionStatus.VALIDATED)
        self.assertEqual(submission.get_report(Indicator.PROJECT_STRUCTURE),
                         SubmissionReport.NOK)
        self.assertEqual(len(submission.structure_errors), 1)
        self.build_service.dispatch.assert_not_called()

    def test_pending_submission(self):
        self.call()
        self.assertEqual(self.count_submissions(), 1)
        with self.assertRaises(PendingSubmission):
            self.call(user_id=self.partner_id,
                      timestamp=self.timestamp + timedelta(seconds=1))
        self.assertEqual(self.count_submissions(), 1)
        self.assertEqual(self.build_service.dispatch.call_count, 1)

    def test_pending_submission_done(self):
        first = self.call()
        first.set_status(SubmissionStatus.VALIDATED)
        self.session.commit()
        second = self.call(timestamp=self.timestamp + timedelta(seconds=1))
        self.assertIsNot(second, first)
        self.assertIs(second.group, first.group)
        self.assertEqual(self.count_submissions(), 2)

    def test_cooloff(self):
        self.assignment.cooloff_period = 10
        self.session.commit()
        first = self.call()
        first.set_status(SubmissionStatus.VALIDATED)
        self.session.commit()
        with self.assertRaises(CooloffActive) as context:
            self.call(timestamp=self.timestamp + timedelta(minutes=1))
        self.assertIn("next_allowed", context.exception.text_params)
        self.assertEqual(self.count_submissions(), 1)
        # Teachers don't wait.
        self.call(timestamp=self.timestamp + timedelta(minutes=1),
                  unrestricted=True)
        self.assertEqual(self.count_submissions(), 2)

    def test_cooloff_from_partner(self):
        self.assignment.cooloff_period = 10
        self.session.commit()
        first = self.call(user_id=self.partner_id)
        first.set_status(SubmissionStatus.VALIDATED)
        self.session.commit()
        with self.assertRaises(CooloffActive):
            self.call(timestamp=self.timestamp + timedelta(minutes=1))
        self.assertEqual(self.count_submissions(), 1)

    def test_not_a_member(self):
        with self.assertRaises(NotAGroupMember):
            self.call(user_id=unique_user_id())
        self.assertEqual(self.count_submissions(), 0)

    def assertNothingStored(self):
        stored = []
        for _, _, files in os.walk(self.storage.root()):
            stored.extend(files)
        self.assertEqual(stored, [])

    def test_not_a_member_leaves_nothing_behind(self):
        with self.assertRaises(NotAGroupMember):
            self.call(user_id=unique_user_id())
        self.assertNothingStored()

    def test_missing_authors_leaves_nothing_behind(self):
        upload = self.write_zip(
            {"src/%s/Main.java" % PACKAGE: "class Main {}"}, "noauth.zip")
        with self.assertRaises(AuthorsManifestMissing):
            self.call(upload=upload)
        self.assertNothingStored()

    def test_pending_submission_leaves_nothing_behind(self):
        first = self.call()
        kept = set(os.listdir(os.path.dirname(
            self.storage.get_upload_folder(first))))
        with self.assertRaises(PendingSubmission):
            self.call(user_id=self.partner_id,
                      timestamp=self.timestamp + timedelta(seconds=1))
        self.assertEqual(set(os.listdir(os.path.dirname(
            self.storage.get_upload_folder(first)))), kept)

    def test_inactive(self):
        self.assignment.active = False
        self.session.commit()
        with self.assertRaises(AssignmentInactive):
            self.call()
        self.assertEqual(self.count_submissions(), 0)
        self.call(unrestricted=True)
        self.assertEqual(self.count_submissions(), 1)

    def test_not_zip(self):
        upload = self.write_file("project.rar", b"whatever")
        with self.assertRaises(ValidationError):
            self.call(upload=upload)

    def test_too_big(self):
        with patch.object(config.submission, "max_upload_size", 10):
            with self.assertRaises(ValidationError):
                self.call()

    def test_missing_authors(self):
        upload = self.write_zip(
            {"src/%s/Main.java" % PACKAGE: "class Main {}"}, "noauth.zip")
        with self.assertRaises(AuthorsManifestMissing):
            self.call(upload=upload)
        self.assertEqual(self.count_submissions(), 0)

    def test_wrong_method(self):
        self.assignment.submission_method = SubmissionMethod.GIT
        self.session.commit()
        with self.assertRaises(WrongSubmissionMethod):
            self.call()

    def test_unknown_assignment(self):
        with self.assertRaises(EntityNotFound):
            accept_upload(self.session, self.storage, self.build_service,
                          self.teacher_files, "nonexistent", self.user_id,
                          self.upload, self.timestamp)

    def test_transformation_failed(self):
        with patch("dropproject.submission.workflow.mavenize") as mavenize:
            mavenize.side_effect = TransformationFailed("disk full")
            with self.assertRaises(TransformationFailed):
                self.call()
        submission = self.session.query(Submission)\
            .filter(Submission.assignment_id == self.assignment.id).one()
        self.assertIs(submission.status, SubmissionStatus.FAILED)
        self.build_service.dispatch.assert_not_called()


class TestRebuild(WorkflowTestMixin, unittest.TestCase):

    def setUp(self):
        super().setUp()
        self.assignment = self.add_assignment(
            package_name="org.dropproject.sample")
        self.session.commit()
        self.submission = accept_upload(
            self.session, self.storage, self.build_service,
            self.teacher_files, self.assignment.id, self.user_id,
            self.write_zip(make_project([self.user_id])), self.timestamp)
        self.status_date = self.timestamp - timedelta(hours=1)
        self.submission.set_status(SubmissionStatus.VALIDATED,
                                   timestamp=self.status_date)
        self.session.commit()
        self.build_service.reset_mock()

    def test_rebuild(self):
        submission = rebuild(self.session, self.build_service,
                             self.teacher_files, self.submission.id)
        self.assertIs(submission, self.submission)
        self.assertIs(submission.status, SubmissionStatus.REBUILDING)
        self.assertEqual(submission.status_date, self.status_date)
        self.build_service.dispatch.assert_called_once_with(
            submission, self.teacher_files.get_project_folder(submission),
            submission.group.authors_label, preserve_status_date=True)

    def test_rebuild_in_flight(self):
        self.submission.set_status(SubmissionStatus.SUBMITTED)
        self.session.commit()
        with self.assertRaises(PolicyViolation):
            rebuild(self.session, self.build_service, self.teacher_files,
                    self.submission.id)
        self.build_service.dispatch.assert_not_called()

    def test_rebuild_without_tree(self):
        os.rename(self.teacher_files.get_project_folder(self.submission),
                  self.get_path("moved"))
        with self.assertRaises(PolicyViolation):
            rebuild(self.session, self.build_service, self.teacher_files,
                    self.submission.id)

    def test_rebuild_full(self):
        clone = rebuild_full(self.session, self.storage, self.build_service,
                             self.teacher_files, self.submission.id)
        self.assertNotEqual(clone.id, self.submission.id)
        self.assertTrue(clone.rebuilt)
        self.assertIs(clone.status, SubmissionStatus.REBUILDING)
        self.assertEqual(clone.submission_date,
                         self.submission.submission_date)
        self.assertIs(clone.group, self.submission.group)
        # The original is untouched.
        self.assertIs(self.submission.status, SubmissionStatus.VALIDATED)
        self.assertEqual(self.submission.status_date, self.status_date)

        tree = self.teacher_files.get_project_folder(clone)
        self.assertTrue(tree.endswith("-mavenized-for-rebuild"))
        self.assertTrue(os.path.isdir(tree))
        self.build_service.dispatch.assert_called_once_with(
            clone, tree, clone.group.authors_label)

    def test_rebuild_full_files_gone(self):
        archive = self.storage.get_upload_folder(self.submission) + ".zip"
        os.remove(archive)
        with self.assertRaises(StorageFailed):
            rebuild_full(self.session, self.storage, self.build_service,
                         self.teacher_files, self.submission.id)

    def test_deleted_is_not_rebuilt(self):
        delete_submission(self.session, self.submission.id)
        with self.assertRaises(PolicyViolation):
            rebuild(self.session, self.build_service, self.teacher_files,
                    self.submission.id)
        with self.assertRaises(PolicyViolation):
            rebuild_full(self.session, self.storage, self.build_service,
                         self.teacher_files, self.submission.id)
        self.assertIs(self.submission.status, SubmissionStatus.DELETED)
        self.assertEqual(self.count_submissions(), 1)
        self.build_service.dispatch.assert_not_called()

    def test_delete(self):
        submission = delete_submission(self.session, self.submission.id)
        self.assertIs(submission.status, SubmissionStatus.DELETED)
        with self.assertRaises(EntityNotFound):
            delete_submission(self.session, 987654321)


class TestAcceptGitSubmission(WorkflowTestMixin, unittest.TestCase):

    def setUp(self):
        super().setUp()
        self.assignment = self.add_assignment(
            package_name="org.dropproject.sample",
            submission_method=SubmissionMethod.GIT)
        author = self.add_author(user_id=self.user_id)
        self.group = self.add_group(authors=[author])
        self.git_submission = self.add_git_submission(
            assignment=self.assignment, submitter_user_id=self.user_id,
            group=self.group, connected=True)
        self.session.commit()
        self.working_copy = self.write_project(
            os.path.join("git", self.git_submission
                         .get_folder_relative_to_storage_root()),
            make_project([self.user_id]))

    def call(self, user_id=None, **kwargs):
        return accept_git_submission(
            self.session, self.storage, self.build_service,
            self.teacher_files, self.git_submission.id,
            user_id if user_id is not None else self.user_id,
            self.timestamp, **kwargs)

    def test_success(self):
        submission = self.call()
        self.assertIs(submission.status, SubmissionStatus.SUBMITTED)
        self.assertIsNone(submission.upload_folder)
        self.assertIs(submission.git_submission, self.git_submission)
        self.assertEqual(self.git_submission.last_submission_id,
                         submission.id)
        # Working copies are reused.
        self.assertTrue(os.path.isdir(self.working_copy))
        self.build_service.dispatch.assert_called_once()

    def test_not_connected(self):
        self.git_submission.connected = False
        self.session.commit()
        with self.assertRaises(PolicyViolation):
            self.call()
        self.assertEqual(self.count_submissions(), 0)

    def test_not_a_member(self):
        with self.assertRaises(NotAGroupMember):
            self.call(user_id=unique_user_id())

    def test_pending(self):
        self.call()
        with self.assertRaises(PendingSubmission):
            self.call()
        self.assertEqual(self.count_submissions(), 1)


if __name__ == "__main__":
    unittest.main()
