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

"""Asynchronous builds of the canonical trees.

The build facility (compiler, test runner, report parser) is external:
BuildService runs it in a gevent pool and records its outcome on the
submission when it reports back.

"""

import enum
import logging
from abc import ABCMeta, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field

import gevent.lock
import gevent.pool

from dropproject.db import BuildReport, Indicator, SessionGen, Submission, \
    SubmissionStatus
from dropproject.log import OperationAdapter


logger = logging.getLogger(__name__)


class BuildOutcome(enum.Enum):
    SUCCESS = "success"
    FAILED = "failed"
    ABORTED_BY_TIMEOUT = "timeout"
    TOO_MUCH_OUTPUT = "too much output"
    ILLEGAL_ACCESS = "illegal access"


FAULT_STATUSES = {
    BuildOutcome.FAILED: SubmissionStatus.FAILED,
    BuildOutcome.ABORTED_BY_TIMEOUT: SubmissionStatus.ABORTED_BY_TIMEOUT,
    BuildOutcome.TOO_MUCH_OUTPUT: SubmissionStatus.TOO_MUCH_OUTPUT,
    BuildOutcome.ILLEGAL_ACCESS: SubmissionStatus.ILLEGAL_ACCESS,
}


@dataclass
class BuildResult:
    """What the build facility reports for one submission.

    output is the raw text produced by the build; indicators are the
    evaluation results it computed, in order.

    """
    outcome: BuildOutcome
    output: str = ""
    indicators: list[tuple[Indicator, str]] = field(default_factory=list)


class BuildFacility(metaclass=ABCMeta):
    """Interface of the component compiling and testing a project."""

    @abstractmethod
    def run(self, project_folder: str, authors_label: str,
            submission_id: int, rebuild: bool) -> BuildResult:
        """Build and test the canonical tree in project_folder.

        It is called in a greenlet of the build pool, and is expected
        to enforce its own time and output limits.

        project_folder: the canonical tree.
        authors_label: the user ids of the authors, "|"-joined.
        submission_id: the submission being built.
        rebuild: whether the submission comes from a full rebuild.

        return: the outcome of the build.

        """
        pass


class ExecutionContext:
    """The pool running the builds, and its bookkeeping.

    One context is given to each BuildService; nothing about running
    builds is kept in global state.

    """

    def __init__(self, size: int | None = None):
        """Create a context.

        size: the maximum number of concurrent builds; None or 0 for
            no limit.

        """
        self.pool = gevent.pool.Pool(size or None)
        self.dispatched = 0
        self.completed = 0

    @property
    def active_count(self) -> int:
        return len(self.pool)

    def spawn(self, func, *args, **kwargs) -> gevent.Greenlet:
        self.dispatched += 1
        greenlet = self.pool.spawn(func, *args, **kwargs)
        greenlet.link(self._done)
        return greenlet

    def _done(self, unused_greenlet):
        self.completed += 1

    def join(self, timeout: float | None = None) -> bool:
        """Wait for all the running builds to finish.

        return: whether they all finished before the timeout.

        """
        return self.pool.join(timeout=timeout)


class BuildService:
    """Dispatch builds and record their results.

    build_ended is the only place where a submission leaves the
    in-flight statuses after intake. Results for the same submission
    are recorded one at a time; different submissions proceed in
    parallel.

    """

    def __init__(self, facility: BuildFacility, context: ExecutionContext):
        self.facility = facility
        self.context = context
        self._locks_guard = gevent.lock.RLock()
        self._locks: dict[int, list] = {}

    @contextmanager
    def _submission_lock(self, submission_id: int):
        with self._locks_guard:
            entry = self._locks.setdefault(
                submission_id, [gevent.lock.RLock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[submission_id]

    def dispatch(self, submission: Submission, project_folder: str,
                 authors_label: str,
                 preserve_status_date: bool = False) -> gevent.Greenlet:
        """Start the build of submission without waiting for it.

        The submission must already be committed, since the build
        greenlet reads it with its own session.

        submission: the submission to build.
        project_folder: its canonical tree.
        authors_label: the user ids of the authors, "|"-joined.
        preserve_status_date: whether the final status keeps the date
            of the current one.

        return: the greenlet running the build.

        """
        OperationAdapter(logger, authors_label).info(
            "Dispatching build of submission %d (%s).",
            submission.id, project_folder)
        return self.context.spawn(
            self._build, submission.id, project_folder, authors_label,
            submission.rebuilt, preserve_status_date)

    def _build(self, submission_id: int, project_folder: str,
               authors_label: str, rebuild: bool,
               preserve_status_date: bool):
        operation_logger = OperationAdapter(logger, authors_label)
        try:
            result = self.facility.run(project_folder, authors_label,
                                       submission_id, rebuild)
        except Exception as error:
            # The submission must not stay in flight forever.
            operation_logger.error(
                "Build of submission %d raised an exception.",
                submission_id, exc_info=True)
            result = BuildResult(BuildOutcome.FAILED,
                                 output="%s: %s" % (type(error).__name__,
                                                    error))
        self.build_ended(submission_id, result, preserve_status_date)

    def build_ended(self, submission_id: int, result: BuildResult,
                    preserve_status_date: bool = False) -> bool:
        """Record the result of a build.

        Results for submissions that are no longer in flight (e.g.
        deleted in the meantime) are ignored.

        submission_id: the submission that was built.
        result: what the build facility reported.
        preserve_status_date: whether the new status keeps the date of
            the current one.

        return: whether the result was recorded.

        """
        with self._submission_lock(submission_id):
            with SessionGen() as session:
                lookup = Submission.lookup(session, submission_id,
                                           for_update=True)
                if not lookup:
                    logger.error("Received build result for unexisting "
                                 "submission %d.", submission_id)
                    return False
                submission = lookup.unwrap()
                if not submission.status.in_flight:
                    logger.warning(
                        "Ignoring build result for submission %d, its "
                        "status is %s.", submission_id,
                        submission.status.name)
                    return False

                if result.output:
                    submission.build_report = \
                        BuildReport(build_report=result.output)
                if result.outcome is BuildOutcome.SUCCESS:
                    for indicator, value in result.indicators:
                        submission.add_report(indicator, value)
                    status = SubmissionStatus.VALIDATED_REBUILT \
                        if submission.rebuilt \
                        else SubmissionStatus.VALIDATED
                else:
                    status = FAULT_STATUSES[result.outcome]
                submission.set_status(
                    status, preserve_status_date=preserve_status_date)
                session.commit()

                OperationAdapter(logger, submission.group.authors_label)\
                    .info("Submission %d was built: %s.",
                          submission_id, status.name)
        return True
