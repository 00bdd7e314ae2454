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

"""Errors raised by the submission pipeline.

They are grouped in families that callers handle differently:
validation errors are shown to the student as a list, policy
violations are rejections happening before any change is made,
storage, archive, git and transformation failures carry the message
of their cause, and conflicts are raised by the git reconciliation.

"""

from datetime import datetime


# Dummy function to mark translatable strings.
def N_(msgid):
    return msgid


class EntityNotFound(Exception):
    """A lookup that had to succeed found nothing."""

    def __init__(self, entity: str, key: object):
        super().__init__("%s %r not found" % (entity, key))
        self.entity = entity
        self.key = key


class ValidationError(Exception):
    """The submitted project is not acceptable as it is."""

    def __init__(self, messages: list[str]):
        super().__init__("; ".join(messages))
        self.messages = list(messages)


class InvalidProjectStructure(ValidationError):
    """The project tree violates the rules of the assignment."""
    pass


class AuthorsManifestMissing(ValidationError):
    """There is no AUTHORS.txt file in the project."""

    def __init__(self):
        super().__init__([N_("The project does not contain an AUTHORS.txt "
                             "file")])


class AuthorsManifestMalformed(ValidationError):
    """AUTHORS.txt breaks a specific rule (e.g. missing surname)."""
    pass


class AuthorsManifestUnparseable(ValidationError):
    """AUTHORS.txt can't be read at all, or lists nobody."""
    pass


class PolicyViolation(Exception):
    """The request is refused; nothing was changed."""

    def __init__(self, subject: str, text: str, text_params: object = None):
        super().__init__(subject, text, text_params)
        self.subject = subject
        self.text = text
        self.text_params = text_params

    @property
    def formatted_text(self):
        if self.text_params is None:
            return self.text
        return self.text % self.text_params


class CooloffActive(PolicyViolation):

    def __init__(self, next_allowed: datetime):
        super().__init__(
            N_("Too frequent submissions!"),
            N_("You can submit again after %(next_allowed)s."),
            {"next_allowed": next_allowed.strftime("%Y-%m-%d %H:%M:%S")})
        self.next_allowed = next_allowed


class PendingSubmission(PolicyViolation):

    def __init__(self):
        super().__init__(
            N_("Submission pending"),
            N_("A previous submission of your group is still being "
               "processed, wait for it to finish."))


class NotAGroupMember(PolicyViolation):

    def __init__(self, user_id: str):
        super().__init__(
            N_("Not a group member"),
            N_("User %(user)s is not listed in the AUTHORS.txt file."),
            {"user": user_id})


class AccessDenied(PolicyViolation):

    def __init__(self, text: str, text_params: object = None):
        super().__init__(N_("Access denied"), text, text_params)


class WrongSubmissionMethod(PolicyViolation):

    def __init__(self, expected: str):
        super().__init__(
            N_("Invalid submission"),
            N_("This assignment only accepts %(method)s submissions."),
            {"method": expected})


class AssignmentInactive(PolicyViolation):

    def __init__(self, assignment_id: str):
        super().__init__(
            N_("Assignment inactive"),
            N_("Assignment %(assignment)s is not accepting submissions."),
            {"assignment": assignment_id})


class StorageFailed(Exception):
    """The raw project couldn't be stored or retrieved."""
    pass


class ArchiveFailed(StorageFailed):
    """The uploaded archive couldn't be packed or unpacked."""
    pass


class TransformationFailed(Exception):
    """Copying the project into its canonical layout failed."""
    pass


class GitFailed(Exception):
    """A git operation failed; the message is git's own."""
    pass


class EmptyRepository(GitFailed):
    """The remote has no branch to fetch, usually it has no commits."""
    pass


class Conflict(Exception):
    """Another group member has already connected a repository."""

    def __init__(self, user_id: str, assignment_id: str):
        super().__init__(
            "User %s already connected a repository for assignment %s"
            % (user_id, assignment_id))
        self.user_id = user_id
        self.assignment_id = assignment_id
