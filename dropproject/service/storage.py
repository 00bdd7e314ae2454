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

"""Storage of the raw projects sent by the students.

"""

import logging
import os
import shutil
from abc import ABCMeta, abstractmethod

from dropproject import config, sanitize_id
from dropproject.db import Submission
from dropproject.errors import ArchiveFailed, StorageFailed
from dpcommon.archive import Archive, ArchiveException
from dpcommon.datetime import make_datetime, make_timestamp


logger = logging.getLogger(__name__)


class StorageService(metaclass=ABCMeta):
    """Interface of the storage of raw projects."""

    @abstractmethod
    def root(self) -> str:
        """Return the folder all stored uploads are below."""
        pass

    @abstractmethod
    def store(self, upload_path: str, assignment_id: str) -> str:
        """Store an uploaded archive and unpack it.

        upload_path: the archive as received.
        assignment_id: the assignment it was sent to.

        return: the folder with the unpacked project; its path
            relative to root() identifies the upload.

        raise (StorageFailed): if storing or unpacking fails.

        """
        pass

    @abstractmethod
    def discard(self, folder: str):
        """Remove an upload that was stored but not accepted.

        folder: as returned by store.

        """
        pass

    @abstractmethod
    def retrieve(self, submission: Submission) -> str | None:
        """Return the folder with the raw project of submission.

        return: the folder, or None if it is gone.

        raise (StorageFailed): if the project exists but can't be
            restored.

        """
        pass

    @abstractmethod
    def get_git_submission_folder(self, git_submission) -> str:
        """Return where the working copy of git_submission lives."""
        pass

    @abstractmethod
    def pack(self, folder: str, archive_path: str) -> str:
        """Create an archive with the content of folder.

        return: the path of the archive.

        raise (ArchiveFailed): if the archive can't be created.

        """
        pass


class FileSystemStorage(StorageService):
    """Keep the uploads in a local folder.

    Each upload is kept both as the archive received and as the folder
    it unpacks to, side by side: <root>/<assignment>/<name>.zip and
    <root>/<assignment>/<name>. The folder may be deleted once the
    project has been transformed, and is unpacked again on demand.

    """

    def __init__(self, upload_root: str | None = None,
                 git_root: str | None = None):
        self._root = upload_root if upload_root is not None \
            else config.storage.upload_root
        self.git_root = git_root if git_root is not None \
            else config.storage.git_root

    def root(self) -> str:
        return self._root

    def _new_upload_name(self, upload_path: str, assignment_id: str) -> str:
        stem = os.path.splitext(os.path.basename(upload_path))[0]
        base = "%s/%d-%s" % (sanitize_id(assignment_id),
                             int(make_timestamp(make_datetime()) * 1000),
                             sanitize_id(stem) or "project")
        name = base
        counter = 1
        while os.path.lexists(os.path.join(self._root, name + ".zip")):
            counter += 1
            name = "%s-%d" % (base, counter)
        return name

    def store(self, upload_path: str, assignment_id: str) -> str:
        name = self._new_upload_name(upload_path, assignment_id)
        archive_path = os.path.join(self._root, name + ".zip")
        folder = os.path.join(self._root, name)
        try:
            os.makedirs(os.path.dirname(archive_path), exist_ok=True)
            shutil.copyfile(upload_path, archive_path)
        except OSError as error:
            logger.error("Storing upload %s failed.", upload_path,
                         exc_info=True)
            raise StorageFailed(
                "Couldn't store %s: %s" % (upload_path, error)) from error
        self._unpack(archive_path, folder)
        logger.info("Stored upload %s in %s.", upload_path, folder)
        return folder

    def discard(self, folder: str):
        shutil.rmtree(folder, ignore_errors=True)
        try:
            os.remove(folder + ".zip")
        except FileNotFoundError:
            pass
        logger.info("Discarded upload %s.", folder)

    def _unpack(self, archive_path: str, folder: str):
        try:
            Archive.extract_to_dir(archive_path, folder)
        except ArchiveException as error:
            shutil.rmtree(folder, ignore_errors=True)
            raise ArchiveFailed(str(error)) from error

    def get_upload_folder(self, submission: Submission) -> str:
        return os.path.join(self._root, submission.upload_folder)

    def get_git_submission_folder(self, git_submission) -> str:
        """Return the working copy of a GitSubmission."""
        return os.path.join(
            self.git_root,
            git_submission.get_folder_relative_to_storage_root())

    def get_git_folder(self, submission: Submission) -> str | None:
        if submission.git_submission is None:
            return None
        return self.get_git_submission_folder(submission.git_submission)

    def retrieve(self, submission: Submission) -> str | None:
        if submission.upload_folder is None:
            folder = self.get_git_folder(submission)
            if folder is None or not os.path.isdir(folder):
                return None
            return folder

        folder = self.get_upload_folder(submission)
        if os.path.isdir(folder):
            return folder
        archive_path = folder + ".zip"
        if not os.path.isfile(archive_path):
            return None
        logger.info("Unpacking %s again.", archive_path)
        self._unpack(archive_path, folder)
        return folder

    def pack(self, folder: str, archive_path: str) -> str:
        try:
            Archive.create_from_dir(folder, archive_path)
        except (ArchiveException, OSError) as error:
            raise ArchiveFailed(str(error)) from error
        return archive_path
