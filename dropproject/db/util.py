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

"""Utilities relying on the database.

"""

from sqlalchemy import func, select

from . import Author, ProjectGroup, Submission, SubmissionStatus


def get_or_create_project_group(session, authors) -> ProjectGroup:
    """Return the group made exactly of the given authors.

    Missing authors are created, and existing ones get the name
    written in the manifest. The group is created if no group has the
    same set of authors.

    session (Session): the session to use.
    authors ([AuthorDetails]): the authors, as read from AUTHORS.txt.

    return: the group, possibly new and not flushed yet.

    """
    author_rows = []
    for details in authors:
        author = session.scalars(
            select(Author).where(Author.user_id == details.user_id)).first()
        if author is None:
            author = Author(user_id=details.user_id, name=details.name)
            session.add(author)
        else:
            author.name = details.name
        author_rows.append(author)

    wanted = frozenset(author.user_id for author in author_rows)
    # Candidates are the groups of any of the authors with the right
    # size, the exact match is checked in Python.
    candidates = session.scalars(
        select(ProjectGroup)
        .join(ProjectGroup.authors)
        .where(Author.user_id.in_(wanted))
        .group_by(ProjectGroup.id)
        .having(func.count(Author.id) == len(wanted))).all()
    for group in candidates:
        if group.author_ids == wanted:
            return group

    group = ProjectGroup(authors=author_rows)
    session.add(group)
    return group


def get_group_lock(session, group: ProjectGroup):
    """Lock the row of group until the end of the transaction.

    Operations that check and then change the submissions of a group
    take this lock first, so that concurrent requests of the same group
    are serialized. On databases without row locks (SQLite) it is a
    plain read, and the database lock serializes the writes.

    """
    if group.id is None:
        session.flush()
    return session.scalars(
        select(ProjectGroup)
        .where(ProjectGroup.id == group.id)
        .with_for_update()).one()


def get_submissions(session, assignment_id: str,
                    include_deleted: bool = False,
                    final_only: bool = False) -> list[Submission]:
    """Return the submissions of an assignment, oldest first.

    session (Session): the session to use.
    assignment_id: the assignment.
    include_deleted: whether to return also deleted submissions.
    final_only: whether to return only those marked as final.

    """
    query = select(Submission)\
        .where(Submission.assignment_id == assignment_id)
    if not include_deleted:
        query = query.where(Submission.status != SubmissionStatus.DELETED)
    if final_only:
        query = query.where(Submission.marked_as_final.is_(True))
    query = query.order_by(Submission.submission_date, Submission.id)
    return list(session.scalars(query))
