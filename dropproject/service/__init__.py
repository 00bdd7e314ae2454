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

"""Package containing the collaborators of the submission pipeline:
the build service, the storage of raw projects and the git client
with the reconciliation of git submissions.

"""

from .buildservice import BuildOutcome, BuildResult, BuildFacility, \
    ExecutionContext, BuildService
from .git import CommitInfo, GitClient, is_valid_ssh_url, \
    get_repository_info
from .gitreconciler import find_git_submission, setup_git_submission, \
    connect_git_submission, refresh_git_submission, reset_git_submission
from .storage import StorageService, FileSystemStorage


__all__ = [
    # buildservice.py
    "BuildOutcome", "BuildResult", "BuildFacility", "ExecutionContext",
    "BuildService",
    # git.py
    "CommitInfo", "GitClient", "is_valid_ssh_url", "get_repository_info",
    # gitreconciler.py
    "find_git_submission", "setup_git_submission", "connect_git_submission",
    "refresh_git_submission", "reset_git_submission",
    # storage.py
    "StorageService", "FileSystemStorage",
]
