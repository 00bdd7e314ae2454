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

"""Intake, rebuild and deletion of submissions.

Structure validation and transformation run synchronously in the
caller; the build is then dispatched to the BuildService and the
caller gets the submission back right away. Every function here owns
its transaction: it commits on success, and rolls back before raising
a policy violation.

"""

import logging
import os
from datetime import datetime

from dropproject import config
from dropproject.db import Assignment, GitSubmission, Submission, \
    SubmissionMethod, SubmissionReport, SubmissionStatus, Indicator, \
    get_group_lock, get_or_create_project_group
from dropproject.errors import N_, AssignmentInactive, CooloffActive, \
    NotAGroupMember, PendingSubmission, PolicyViolation, StorageFailed, \
    TransformationFailed, ValidationError, WrongSubmissionMethod
from dropproject.log import OperationAdapter
from .authors import AuthorDetails, authors_label, read_authors
from .check import check_cooloff, has_pending_submission, \
    is_accepting_submissions
from .mavenizer import mavenize
from .structure import validate_structure
from .teacherfiles import TeacherFiles


logger = logging.getLogger(__name__)


def _check_can_submit(session, assignment: Assignment, user_id: str,
                      timestamp: datetime):
    if not is_accepting_submissions(assignment, user_id):
        raise AssignmentInactive(assignment.id)
    next_allowed = check_cooloff(session, assignment, user_id, timestamp)
    if next_allowed is not None:
        logger.info("User %s can't submit to %s before %s.",
                    user_id, assignment.id, next_allowed)
        raise CooloffActive(next_allowed)


def _check_upload_file(upload_path: str):
    if not upload_path.lower().endswith(".zip"):
        raise ValidationError([N_("The file must be a .zip archive")])
    try:
        size = os.path.getsize(upload_path)
    except OSError as error:
        raise StorageFailed("Cannot read %s: %s"
                            % (upload_path, error)) from error
    if size > config.submission.max_upload_size:
        raise ValidationError([N_("The file is too big (%d bytes, at most "
                                  "%d allowed)")
                               % (size, config.submission.max_upload_size)])


def _reserve_group(session, assignment: Assignment,
                   authors: list[AuthorDetails]):
    """Find the group of authors and check it has nothing pending.

    The group row stays locked until the caller commits, so that the
    check is still valid when the new submission is inserted.

    raise (PendingSubmission): if the group has a submission still
        waiting for its first build.

    """
    group = get_or_create_project_group(session, authors)
    get_group_lock(session, group)
    if has_pending_submission(session, group, assignment):
        session.rollback()
        raise PendingSubmission()
    return group


def build_submission(session, build_service, teacher_files: TeacherFiles,
                     project_folder: str, assignment: Assignment,
                     authors: list[AuthorDetails], submission: Submission,
                     teacher_rebuild: bool = False) -> Submission:
    """Validate, transform and dispatch a submission already added to
    the session.

    A project with structure errors is VALIDATED right away, with the
    errors attached, and is not built.

    session (Session): the session the submission belongs to.
    build_service (BuildService): where to dispatch the build.
    teacher_files: the locations of the teacher files and trees.
    project_folder: the raw project.
    assignment: the assignment of the submission.
    authors: the authors read from the project.
    submission: the submission to process.
    teacher_rebuild: whether this is a full rebuild requested by a
        teacher, which goes through REBUILDING keeping the status
        date.

    return: the submission.

    raise (TransformationFailed): if the canonical tree can't be
        built; the submission is FAILED.

    """
    label = authors_label(authors)
    operation_logger = OperationAdapter(logger, label)
    session.flush()

    errors = validate_structure(project_folder, assignment)
    if errors:
        submission.add_report(Indicator.PROJECT_STRUCTURE,
                              SubmissionReport.NOK)
        submission.structure_errors = errors
        submission.set_status(SubmissionStatus.VALIDATED)
        session.commit()
        operation_logger.info("Submission %d has %d structure errors.",
                              submission.id, len(errors))
        return submission

    submission.add_report(Indicator.PROJECT_STRUCTURE, SubmissionReport.OK)
    operation_logger.info("Submission %d: project structure OK.",
                          submission.id)

    try:
        project_tree = mavenize(project_folder, submission, assignment,
                                teacher_files)
    except TransformationFailed:
        operation_logger.error("Submission %d couldn't be transformed.",
                               submission.id, exc_info=True)
        submission.set_status(SubmissionStatus.FAILED)
        session.commit()
        raise

    if teacher_rebuild:
        submission.set_status(SubmissionStatus.REBUILDING,
                              preserve_status_date=True)
    session.commit()

    build_service.dispatch(submission, project_tree, label)
    return submission


def accept_upload(
    session,
    storage,
    build_service,
    teacher_files: TeacherFiles,
    assignment_id: str,
    user_id: str,
    upload_path: str,
    timestamp: datetime,
    unrestricted: bool = False,
) -> Submission:
    """Process a student's request to submit an archive.

    session (Session): the session to use.
    storage (StorageService): where to keep the upload.
    build_service (BuildService): where to dispatch the build.
    teacher_files: the locations of the teacher files and trees.
    assignment_id: the assignment submitted to.
    user_id: who is submitting.
    upload_path: the archive received.
    timestamp: when it was received.
    unrestricted: whether user_id is a teacher, who can submit to
        inactive assignments, without cool-off, on behalf of anyone.

    return: the new submission.

    raise (EntityNotFound): if the assignment doesn't exist.
    raise (PolicyViolation): if the submission is refused.
    raise (ValidationError): if the file or its AUTHORS.txt are
        invalid.
    raise (StorageFailed): if the upload can't be stored.
    raise (TransformationFailed): see build_submission.

    """
    assignment = Assignment.lookup(session, assignment_id).unwrap()
    if assignment.submission_method is not SubmissionMethod.UPLOAD:
        raise WrongSubmissionMethod(N_("git"))
    if not unrestricted:
        _check_can_submit(session, assignment, user_id, timestamp)
    _check_upload_file(upload_path)

    project_folder = storage.store(upload_path, assignment.id)
    try:
        authors = read_authors(project_folder)
        if not unrestricted and \
                user_id not in (author.user_id for author in authors):
            raise NotAGroupMember(user_id)
        group = _reserve_group(session, assignment, authors)
    except (ValidationError, PolicyViolation):
        storage.discard(project_folder)
        raise

    submission = Submission(
        assignment=assignment,
        group=group,
        submitter_user_id=user_id,
        submission_date=timestamp,
        upload_folder=os.path.relpath(project_folder, storage.root()),
        status=SubmissionStatus.SUBMITTED,
        status_date=timestamp)
    session.add(submission)

    OperationAdapter(logger, authors_label(authors)).info(
        "Received upload %s for assignment %s.",
        submission.upload_folder, assignment.id)
    return build_submission(session, build_service, teacher_files,
                            project_folder, assignment, authors, submission)


def accept_git_submission(
    session,
    storage,
    build_service,
    teacher_files: TeacherFiles,
    git_submission_id: int,
    user_id: str,
    timestamp: datetime,
    unrestricted: bool = False,
) -> Submission:
    """Create a submission from the working copy of a repository.

    The working copy should have been refreshed first.

    git_submission_id: the connected repository.
    user_id: who is asking.

    return: the new submission.

    raise (PolicyViolation): if the submission is refused.
    raise (ValidationError): if the AUTHORS.txt is invalid.

    """
    git_submission = GitSubmission.lookup(session, git_submission_id)\
        .unwrap()
    assignment = git_submission.assignment
    if assignment.submission_method is not SubmissionMethod.GIT:
        raise WrongSubmissionMethod(N_("upload"))
    if not git_submission.connected:
        raise PolicyViolation(
            N_("Repository not connected"),
            N_("Connect the repository before generating a report."))
    if not unrestricted:
        if not git_submission.group.contains(user_id):
            raise NotAGroupMember(user_id)
        _check_can_submit(session, assignment, user_id, timestamp)

    project_folder = storage.get_git_submission_folder(git_submission)
    authors = read_authors(project_folder)
    group = git_submission.group
    get_group_lock(session, group)
    if has_pending_submission(session, group, assignment):
        session.rollback()
        raise PendingSubmission()

    submission = Submission(
        assignment=assignment,
        group=group,
        submitter_user_id=user_id,
        submission_date=timestamp,
        git_submission=git_submission,
        status=SubmissionStatus.SUBMITTED,
        status_date=timestamp)
    session.add(submission)
    session.flush()
    git_submission.last_submission_id = submission.id

    return build_submission(session, build_service, teacher_files,
                            project_folder, assignment, authors, submission)


def _check_not_deleted(submission: Submission):
    if submission.status is SubmissionStatus.DELETED:
        raise PolicyViolation(
            N_("Rebuild not allowed"),
            N_("Submission %(id)d was deleted."),
            {"id": submission.id})


def rebuild(session, build_service, teacher_files: TeacherFiles,
            submission_id: int) -> Submission:
    """Build again the canonical tree of a submission, as it is.

    Neither the structure nor the teacher files are touched: use
    rebuild_full to apply new teacher files. The status date is kept.

    raise (EntityNotFound): if the submission doesn't exist.
    raise (PolicyViolation): if the submission is still being
        processed, was deleted or was never transformed.

    """
    submission = Submission.lookup(session, submission_id).unwrap()
    _check_not_deleted(submission)
    if submission.status.in_flight:
        raise PolicyViolation(
            N_("Rebuild not allowed"),
            N_("Submission %(id)d is still being processed."),
            {"id": submission.id})
    project_tree = teacher_files.get_project_folder(submission)
    if not os.path.isdir(project_tree):
        raise PolicyViolation(
            N_("Rebuild not allowed"),
            N_("Submission %(id)d was never built, use a full rebuild."),
            {"id": submission.id})

    submission.set_status(SubmissionStatus.REBUILDING,
                          preserve_status_date=True)
    session.commit()
    logger.info("Rebuilding submission %d.", submission.id)
    build_service.dispatch(submission, project_tree,
                           submission.group.authors_label,
                           preserve_status_date=True)
    return submission


def rebuild_full(session, storage, build_service,
                 teacher_files: TeacherFiles,
                 submission_id: int) -> Submission:
    """Process again the raw project of a submission, as a new one.

    The original submission is left untouched; the new one has the
    same group, raw project and submission date, and goes through
    validation and transformation with the current teacher files.

    return: the new submission.

    raise (EntityNotFound): if the submission doesn't exist.
    raise (PolicyViolation): if the submission was deleted.
    raise (StorageFailed): if the raw project is gone.

    """
    original = Submission.lookup(session, submission_id).unwrap()
    _check_not_deleted(original)
    project_folder = storage.retrieve(original)
    if project_folder is None:
        raise StorageFailed("The files of submission %d are not available "
                            "anymore." % original.id)
    authors = read_authors(project_folder)

    submission = original.clone_for_rebuild()
    session.add(submission)
    session.flush()
    logger.info("Submission %d is a full rebuild of submission %d.",
                submission.id, original.id)
    return build_submission(session, build_service, teacher_files,
                            project_folder, original.assignment, authors,
                            submission, teacher_rebuild=True)


def delete_submission(session, submission_id: int) -> Submission:
    """Hide a submission from every listing, keeping its record.

    raise (EntityNotFound): if the submission doesn't exist.

    """
    submission = Submission.lookup(session, submission_id).unwrap()
    submission.set_status(SubmissionStatus.DELETED)
    session.commit()
    logger.info("Submission %d was deleted.", submission.id)
    return submission
