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

"""Persistence layer of the pipeline.

Importing this package creates the engine from the configured database
URL and maps all the models.

"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import configure_mappers

from dropproject import config


logger = logging.getLogger(__name__)


# Define what this package will provide.

__all__ = [
    "engine",
    # session
    "Session", "ScopedSession", "SessionGen",
    # base
    "metadata", "Base", "Found", "NotFound", "LookupResult",
    # assignment
    "Assignment", "AssignmentACL", "Assignee", "Language",
    "SubmissionMethod", "LeaderboardType",
    # group
    "Author", "ProjectGroup",
    # submission
    "Submission", "SubmissionStatus", "SubmissionReport", "Indicator",
    "BuildReport",
    # gitsubmission
    "GitSubmission",
    # init
    "init_db",
    # drop
    "drop_db",
    # util
    "get_or_create_project_group", "get_submissions", "get_group_lock",
]


# Instantiate or import these objects.

_engine_args = {"echo": config.database.debug}
if make_url(config.database.url).get_backend_name() == "postgresql":
    _engine_args.update(pool_timeout=60, pool_recycle=120)
engine = create_engine(config.database.url, **_engine_args)


from .session import Session, ScopedSession, SessionGen

from .base import metadata, Base, Found, NotFound, LookupResult
from .assignment import Assignment, AssignmentACL, Assignee, Language, \
    SubmissionMethod, LeaderboardType
from .group import Author, ProjectGroup
from .submission import Submission, SubmissionStatus, SubmissionReport, \
    Indicator, BuildReport
from .gitsubmission import GitSubmission

from .init import init_db
from .drop import drop_db

from .util import get_or_create_project_group, get_submissions, \
    get_group_lock


configure_mappers()
