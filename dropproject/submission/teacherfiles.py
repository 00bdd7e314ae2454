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

"""Locations of the teacher files and of the canonical trees.

"""

import logging
import os
import shutil

from dropproject import config
from dropproject.db import Assignment, Submission


logger = logging.getLogger(__name__)


class TeacherFiles:
    """Knows where things live on disk for the transformation step.

    The files of an assignment are in assignments_root/<assignment id>;
    the canonical tree of a submission is in mavenized_root, under a
    name derived from the submission.

    """

    # Never copied into the canonical trees.
    IGNORED_NAMES = (".git",)

    def __init__(self, assignments_root: str | None = None,
                 mavenized_root: str | None = None):
        self.assignments_root = assignments_root \
            if assignments_root is not None \
            else config.storage.assignments_root
        self.mavenized_root = mavenized_root \
            if mavenized_root is not None \
            else config.storage.mavenized_root

    def get_assignment_folder(self, assignment: Assignment) -> str:
        return os.path.join(self.assignments_root, assignment.id)

    def copy_to(self, assignment: Assignment, destination: str):
        """Copy the teacher files over destination.

        Files already in destination with the same path are
        overwritten.

        raise (OSError): if the copy fails.

        """
        source = self.get_assignment_folder(assignment)
        if not os.path.isdir(source):
            logger.warning("Assignment %s has no teacher files in %s.",
                           assignment.id, source)
            return
        shutil.copytree(source, destination, dirs_exist_ok=True,
                        ignore=shutil.ignore_patterns(*self.IGNORED_NAMES))

    def get_project_folder(self, submission: Submission) -> str:
        """Return the path of the canonical tree of submission.

        The trees of rebuilt submissions have their own path, so that
        rebuilding never touches the tree that was first graded.

        """
        if submission.upload_folder is not None:
            name = submission.upload_folder
        else:
            name = "git-%d" % submission.id
        suffix = "-mavenized-for-rebuild" if submission.rebuilt \
            else "-mavenized"
        return os.path.join(self.mavenized_root, name + suffix)
