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
"""Access to the students' repositories, through GitPython.

Repositories are accessed with a per-repository deploy key, written to
a private temporary file for the duration of each operation.

"""

import logging
import os
import re
import shutil
import tempfile
import typing
from contextlib import contextmanager
from datetime import datetime

from gevent import subprocess
from git import GitCommandError, InvalidGitRepositoryError, \
    NoSuchPathError, Repo

from dropproject import config
from dropproject.errors import EmptyRepository, GitFailed
from dpcommon.datetime import make_datetime


logger = logging.getLogger(__name__)


SSH_URL_REGEX = re.compile(
    r"^git@(?P<host>[A-Za-z0-9.-]+):(?P<user>[A-Za-z0-9_.-]+)/"
    r"(?P<repo>[A-Za-z0-9_.-]+?)(\.git)?$")


class CommitInfo(typing.NamedTuple):
    sha: str
    author_name: str
    author_email: str
    date: datetime
    message: str


def is_valid_ssh_url(url: str | None) -> bool:
    """Return whether url is like git@github.com:user/repo.git."""
    return url is not None and SSH_URL_REGEX.match(url.strip()) is not None


def get_repository_info(url: str) -> tuple[str, str]:
    """Return the user and repository names in an ssh url.

    raise (ValueError): if the url is not valid.

    """
    match = SSH_URL_REGEX.match(url.strip())
    if match is None:
        raise ValueError("Invalid repository url %s" % url)
    return match.group("user"), match.group("repo")


class GitClient:
    """Clone, pull and inspect local working copies."""

    def __init__(self, ssh_keygen_executable: str = "ssh-keygen",
                 temp_dir: str | None = None):
        self.ssh_keygen_executable = ssh_keygen_executable
        self.temp_dir = temp_dir if temp_dir is not None \
            else config.global_.temp_dir

    @contextmanager
    def _ssh_environment(self, private_key: str):
        """Yield the environment for git to authenticate with
        private_key, which is deleted afterwards.

        """
        key_dir = tempfile.mkdtemp(dir=self.temp_dir)
        try:
            key_path = os.path.join(key_dir, "id_key")
            fd = os.open(key_path, os.O_WRONLY | os.O_CREAT, 0o600)
            with os.fdopen(fd, "wt", encoding="ascii") as f:
                f.write(private_key.strip() + "\n")
            yield {
                "GIT_TERMINAL_PROMPT": "0",
                "GIT_SSH_COMMAND": "ssh -i %s -o IdentitiesOnly=yes "
                                   "-o StrictHostKeyChecking=no "
                                   "-o UserKnownHostsFile=/dev/null"
                                   % key_path,
            }
        finally:
            shutil.rmtree(key_dir, ignore_errors=True)

    @staticmethod
    def _open(destination: str) -> Repo:
        try:
            return Repo(destination)
        except (InvalidGitRepositoryError, NoSuchPathError) as error:
            raise GitFailed("%s is not a working copy: %s"
                            % (destination, error)) from error

    def clone(self, url: str, destination: str, private_key: str) -> str:
        """Clone url into destination, which must not exist.

        return: destination.

        raise (EmptyRepository): if the repository has no commits.
        raise (GitFailed): if the clone fails.

        """
        os.makedirs(os.path.dirname(destination), exist_ok=True)
        with self._ssh_environment(private_key) as env:
            try:
                repo = Repo.clone_from(url, destination, env=env)
            except GitCommandError as error:
                logger.warning("Cloning %s failed: %s", url, error.stderr)
                raise GitFailed(str(error)) from error
        if not repo.head.is_valid():
            raise EmptyRepository("%s has no commits" % url)
        logger.info("Cloned %s into %s.", url, destination)
        return destination

    def pull(self, destination: str, private_key: str) -> str:
        """Fetch and merge the remote changes into destination.

        return: destination.

        raise (EmptyRepository): if the remote has no branches.
        raise (GitFailed): if the pull fails.

        """
        repo = self._open(destination)
        with self._ssh_environment(private_key) as env, \
                repo.git.custom_environment(**env):
            try:
                if not repo.git.ls_remote("--heads", "origin").strip():
                    raise EmptyRepository(
                        "The remote of %s has no branches" % destination)
                repo.remotes.origin.pull(ff_only=True)
            except GitCommandError as error:
                logger.warning("Pulling into %s failed: %s", destination,
                               error.stderr)
                raise GitFailed(str(error)) from error
        return destination

    def last_commit_info(self, destination: str) -> CommitInfo:
        """Return the details of the last commit of the working copy.

        raise (EmptyRepository): if there are no commits.

        """
        repo = self._open(destination)
        try:
            commit = repo.head.commit
        except ValueError as error:
            raise EmptyRepository("%s has no commits: %s"
                                  % (destination, error)) from error
        return CommitInfo(commit.hexsha, commit.author.name,
                          commit.author.email,
                          make_datetime(commit.committed_date),
                          commit.summary)

    def generate_keypair(self) -> tuple[str, str]:
        """Generate a new ssh key pair without passphrase.

        return: the private key and the public key, in OpenSSH format.

        raise (GitFailed): if ssh-keygen fails.

        """
        key_dir = tempfile.mkdtemp(dir=self.temp_dir)
        try:
            key_path = os.path.join(key_dir, "id_key")
            try:
                subprocess.run(
                    [self.ssh_keygen_executable, "-q", "-t", "ed25519",
                     "-N", "", "-C", "dropproject", "-f", key_path],
                    stdout=subprocess.PIPE, stderr=subprocess.PIPE,
                    check=True)
            except (OSError, subprocess.CalledProcessError) as error:
                raise GitFailed(
                    "Cannot generate key pair: %s" % error) from error
            with open(key_path, "rt", encoding="ascii") as f:
                private_key = f.read()
            with open(key_path + ".pub", "rt", encoding="ascii") as f:
                public_key = f.read().strip()
        finally:
            shutil.rmtree(key_dir, ignore_errors=True)
        return private_key, public_key
