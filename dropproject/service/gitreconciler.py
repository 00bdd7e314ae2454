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

"""Registration and synchronization of git repositories.

A student first registers a repository (phase 1: a deploy key is
generated for them to add to it), then connects it (phase 2: the
repository is cloned and its AUTHORS.txt tells which group it belongs
to). Only one connected repository per group and assignment can exist;
the unconnected registrations of the other members are dropped when
one member connects.

"""

import logging

from sqlalchemy import select, update

from dropproject import rmtree
from dropproject.db import Assignment, GitSubmission, Submission, \
    SubmissionMethod, get_group_lock, get_or_create_project_group
from dropproject.errors import N_, Conflict, EmptyRepository, GitFailed, \
    NotAGroupMember, PolicyViolation, ValidationError, \
    WrongSubmissionMethod
from dropproject.submission.authors import read_authors
from dpcommon.datetime import make_datetime
from .git import is_valid_ssh_url


logger = logging.getLogger(__name__)


def find_git_submission(session, user_id: str,
                        assignment_id: str) -> GitSubmission | None:
    """Return the repository user_id works on for an assignment.

    It is either the one they registered, or the connected one of one
    of their groups.

    """
    own = session.scalars(
        select(GitSubmission)
        .where(GitSubmission.assignment_id == assignment_id,
               GitSubmission.submitter_user_id == user_id)).first()
    if own is not None:
        return own
    for git_submission in session.scalars(
            select(GitSubmission)
            .where(GitSubmission.assignment_id == assignment_id,
                   GitSubmission.connected.is_(True),
                   GitSubmission.group_id.is_not(None))):
        if git_submission.group.contains(user_id):
            return git_submission
    return None


def setup_git_submission(session, git_client, assignment_id: str,
                         user_id: str,
                         repository_url: str) -> GitSubmission:
    """Register repository_url as the repository of user_id.

    Calling it again returns the same registration, keeping its key
    pair; a registration without keys gets a new pair.

    return: the registration, with the public key to show the student.

    raise (EntityNotFound): if the assignment doesn't exist.
    raise (ValidationError): if the url is not a valid ssh url.
    raise (GitFailed): if the key pair can't be generated.

    """
    assignment = Assignment.lookup(session, assignment_id).unwrap()
    if assignment.submission_method is not SubmissionMethod.GIT:
        raise WrongSubmissionMethod(N_("upload"))
    if repository_url is None or repository_url.strip() == "" \
            or not is_valid_ssh_url(repository_url):
        raise ValidationError([N_("The repository url must be like "
                                  "git@github.com:user/repository.git")])
    repository_url = repository_url.strip()

    git_submission = find_git_submission(session, user_id, assignment.id)
    if git_submission is not None \
            and git_submission.git_repository_pub_key is not None:
        return git_submission

    private_key, public_key = git_client.generate_keypair()
    if git_submission is None:
        git_submission = GitSubmission(
            assignment=assignment,
            submitter_user_id=user_id,
            git_repository_url=repository_url,
            create_date=make_datetime())
        session.add(git_submission)
    git_submission.git_repository_priv_key = private_key
    git_submission.git_repository_pub_key = public_key
    session.commit()
    logger.info("User %s registered repository %s for assignment %s.",
                user_id, repository_url, assignment.id)
    return git_submission


def connect_git_submission(session, git_client, storage,
                           git_submission_id: int,
                           user_id: str) -> GitSubmission:
    """Clone a registered repository and bind it to its group.

    Either everything succeeds, or the database is left as it was and
    the clone is removed.

    return: the connected registration.

    raise (EntityNotFound): if the registration doesn't exist.
    raise (GitFailed): if the clone fails.
    raise (ValidationError): if the AUTHORS.txt of the repository is
        invalid.
    raise (NotAGroupMember): if user_id is not in AUTHORS.txt.
    raise (Conflict): if another member of the group already
        connected a repository.

    """
    git_submission = GitSubmission.lookup(session, git_submission_id)\
        .unwrap()
    if git_submission.connected:
        return git_submission
    if git_submission.submitter_user_id != user_id:
        raise PolicyViolation(
            N_("Access denied"),
            N_("Only who registered the repository can connect it."))

    folder = storage.get_git_submission_folder(git_submission)
    rmtree(folder, missing_ok=True)
    try:
        git_client.clone(git_submission.git_repository_url, folder,
                         git_submission.git_repository_priv_key)
        authors = read_authors(folder)
        if user_id not in (author.user_id for author in authors):
            raise NotAGroupMember(user_id)

        # The group lock serializes concurrent connections of its
        # members; everything that can fail is checked before changing
        # anything.
        group = get_or_create_project_group(session, authors)
        get_group_lock(session, group)
        peers = session.scalars(
            select(GitSubmission)
            .where(GitSubmission.assignment_id ==
                   git_submission.assignment_id,
                   GitSubmission.id != git_submission.id,
                   GitSubmission.submitter_user_id.in_(
                       [author.user_id for author in authors]))
            .with_for_update()).all()
        for peer in peers:
            if peer.connected:
                raise Conflict(peer.submitter_user_id,
                               git_submission.assignment_id)
        last_commit = git_client.last_commit_info(folder)

        git_submission.group = group
        git_submission.last_commit_date = last_commit.date
        git_submission.connected = True
        for peer in peers:
            logger.info("Dropping repository registration of %s, "
                        "superseded by the one of %s.",
                        peer.submitter_user_id, user_id)
            session.delete(peer)
        session.commit()
    except Exception:
        session.rollback()
        rmtree(folder, missing_ok=True)
        raise

    logger.info("Repository %s of %s is connected.",
                git_submission.git_repository_url, user_id)
    return git_submission


def refresh_git_submission(session, git_client, storage,
                           git_submission_id: int, user_id: str) -> bool:
    """Pull the changes of a connected repository.

    When there are new commits, the pointer to the last submission is
    cleared, meaning that a new submission can be generated.

    return: whether there were new commits.

    raise (NotAGroupMember): if user_id is not in the group.
    raise (EmptyRepository): if the repository has no commits.
    raise (GitFailed): if the pull fails.

    """
    git_submission = GitSubmission.lookup(session, git_submission_id)\
        .unwrap()
    if not git_submission.connected or git_submission.group is None \
            or not git_submission.group.contains(user_id):
        raise NotAGroupMember(user_id)

    folder = storage.get_git_submission_folder(git_submission)
    try:
        git_client.pull(folder, git_submission.git_repository_priv_key)
        last_commit = git_client.last_commit_info(folder)
    except EmptyRepository:
        logger.warning("Repository %s has no commits yet.",
                       git_submission.git_repository_url)
        raise

    changed = last_commit.date != git_submission.last_commit_date
    if changed:
        git_submission.last_commit_date = last_commit.date
        git_submission.last_submission_id = None
        session.commit()
        logger.info("Repository %s has new commits (last on %s).",
                    git_submission.git_repository_url, last_commit.date)
    return changed


def reset_git_submission(session, storage, git_submission_id: int,
                         user_id: str):
    """Forget a registration and delete its working copy.

    The submissions already generated from it are kept.

    raise (PolicyViolation): if user_id is not who registered it.

    """
    git_submission = GitSubmission.lookup(session, git_submission_id)\
        .unwrap()
    if git_submission.submitter_user_id != user_id:
        raise PolicyViolation(
            N_("Access denied"),
            N_("Only who registered the repository can reset it."))

    folder = storage.get_git_submission_folder(git_submission)
    try:
        rmtree(folder, missing_ok=True)
    except OSError as error:
        raise GitFailed("Couldn't delete %s: %s" % (folder, error)) \
            from error

    assignment_id = git_submission.assignment_id
    session.execute(
        update(Submission)
        .where(Submission.git_submission_id == git_submission.id)
        .values(git_submission_id=None))
    session.delete(git_submission)
    session.commit()
    logger.info("User %s reset their repository for assignment %s.",
                user_id, assignment_id)
