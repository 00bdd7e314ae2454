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

"""Package containing the intake of submissions.

A submission goes through the following steps: the raw project (an
uploaded zip file or a git working copy) is checked against the
expected structure, its authors are read from the manifest, it is
transformed into the canonical layout together with the files of the
assignment and finally handed to the build service.

"""

from .authors import AuthorDetails, parse_authors, read_authors, \
    authors_label
from .check import get_submission_count, has_pending_submission, \
    check_cooloff, is_accepting_submissions, check_assignment_access
from .cooloff import next_allowed_submission_time, get_last_submission
from .mavenizer import mavenize, keeps_original_folder, \
    remove_original_folder
from .structure import validate_structure
from .teacherfiles import TeacherFiles
from .workflow import build_submission, accept_upload, \
    accept_git_submission, rebuild, rebuild_full, delete_submission


__all__ = [
    # authors.py
    "AuthorDetails", "parse_authors", "read_authors", "authors_label",
    # check.py
    "get_submission_count", "has_pending_submission", "check_cooloff",
    "is_accepting_submissions", "check_assignment_access",
    # cooloff.py
    "next_allowed_submission_time", "get_last_submission",
    # mavenizer.py
    "mavenize", "keeps_original_folder", "remove_original_folder",
    # structure.py
    "validate_structure",
    # teacherfiles.py
    "TeacherFiles",
    # workflow.py
    "build_submission", "accept_upload", "accept_git_submission",
    "rebuild", "rebuild_full", "delete_submission",
]
