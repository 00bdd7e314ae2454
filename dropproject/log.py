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

import logging
import os
import sys

import gevent.lock

from dpcommon.terminal import colors, add_color_to_string, has_color_support


class StreamHandler(logging.StreamHandler):
    """Subclass to make gevent-aware.

    Use a gevent lock instead of a threading one to block only the
    current greenlet.

    """
    def createLock(self):
        """Set self.lock to a new gevent RLock.

        """
        self.lock = gevent.lock.RLock()


class FileHandler(logging.FileHandler):
    """Subclass to make gevent-aware.

    Use a gevent lock instead of a threading one to block only the
    current greenlet.

    """
    def createLock(self):
        """Set self.lock to a new gevent RLock.

        """
        self.lock = gevent.lock.RLock()


def get_color_hash(string):
    """Deterministically return a color based on the string's content.

    string (string): the string.

    return (int): a color, as a colors.* constant.

    """
    return [colors.BLACK,
            colors.RED,
            colors.GREEN,
            colors.YELLOW,
            colors.BLUE,
            colors.MAGENTA,
            colors.CYAN,
            colors.WHITE][sum(string.encode("utf-8")) % 8]


class CustomFormatter(logging.Formatter):
    """Format log messages as we want them.

    The message is prefixed by the time, the severity, the component
    that logged it and, if present, the operation it was performing
    (for the pipeline, the authors of the submission being processed).
    The parts are colored when the formatter is asked to.

    """
    SEVERITY_COLORS = {logging.CRITICAL: colors.RED,
                       logging.ERROR: colors.RED,
                       logging.WARNING: colors.YELLOW,
                       logging.INFO: colors.GREEN,
                       logging.DEBUG: colors.CYAN}

    def __init__(self, colors=False):
        """Initialize a formatter.

        colors (bool): whether to use colors in formatted output or
            not.

        """
        logging.Formatter.__init__(self, "")
        self.colors = colors

    def format(self, record):
        record.message = record.getMessage()
        record.asctime = self.formatTime(record, self.datefmt)
        s = self.do_format(record)
        if record.exc_info:
            # The traceback text is cached on the record.
            if not record.exc_text:
                record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            if s[-1:] != "\n":
                s = s + "\n"
            s = s + record.exc_text
        return s

    def do_format(self, record):
        """Produce a human-readable message from the given record.

        record (LogRecord): the data for the log message.

        return (string): the formatted log message.

        """
        severity = self.get_severity(record)
        coordinates = self.get_coordinates(record)
        operation = self.get_operation(record)
        message = record.message
        if self.colors:
            severity_col = self.SEVERITY_COLORS[record.levelno]
            severity = add_color_to_string(severity, severity_col,
                                           bold=True, force=True)
            if coordinates != "":
                coordinates = add_color_to_string(
                    coordinates, get_color_hash(coordinates),
                    bold=True, force=True)
            if operation != "":
                operation = add_color_to_string(
                    operation, get_color_hash(operation),
                    bold=True, force=True)

        fmt = severity
        if coordinates.strip() != "":
            fmt += " [%s]" % (coordinates.strip())
        if operation.strip() != "":
            fmt += " [%s]" % (operation.strip())
        fmt += " %s" % message
        return fmt

    def get_severity(self, record):
        """Return the severity part of the log for the given record."""
        return record.asctime + " - " + record.levelname

    def get_coordinates(self, record):
        """Return the coordinates part of the log for the given record.

        It contains the component that originated the log, as set by
        ComponentFilter.

        """
        return getattr(record, "component", "<unknown>")

    def get_operation(self, record):
        """Return the operation part of the log for the given record.

        The operation is a string explicitly passed in the logger call.

        """
        return getattr(record, "operation", "")


class DetailedFormatter(CustomFormatter):
    """A version of custom formatter showing more information."""

    def get_coordinates(self, record):
        """See CustomFormatter.get_coordinates

        The detailed log also contains the thread (greenlet) name, the
        file and the function name.

        """
        coordinates = super().get_coordinates(record)
        coordinates += " %s" % (
            record.threadName.replace("Thread", "").replace("Dummy-", ""))
        coordinates += " %s::%s" % (
            record.filename.replace(".py", ""), record.funcName)
        return coordinates


class ComponentFilter(logging.Filter):
    """Add the component name to filtered log messages.

    No message is dropped: the filter only sets the "component" field
    of records that don't have one.

    """
    def __init__(self, component):
        """Initialize a filter for the given component.

        component (string): the name of the tool or service logging.

        """
        logging.Filter.__init__(self, "")
        self.component = component

    def filter(self, record):
        if not hasattr(record, "component"):
            record.component = self.component
        return True


class OperationAdapter(logging.LoggerAdapter):
    """Helper to attach operation to messages.

    Wraps a logger and adds the operation given to the constructor to
    the "operation" field of the "extra" argument of all messages
    logged with this adapter. If "operation" is already set it isn't
    altered.

    """
    def __init__(self, logger, operation):
        """Initialize an adapter to set the given operation.

        operation (string): a human-readable description of what the
            code will be performing while it's logging messages to
            this object instead of to the wrapped logger.

        """
        logging.LoggerAdapter.__init__(self, logger, {"operation": operation})
        self.operation = operation

    def process(self, msg, kwargs):
        kwargs.setdefault("extra", {}).setdefault("operation", self.operation)
        return msg, kwargs


# Get the root logger.
root_logger = logging.getLogger()
root_logger.setLevel(logging.DEBUG)


# Install a shell handler.
shell_handler = StreamHandler(sys.stdout)
shell_handler.setLevel(logging.INFO)
shell_handler.setFormatter(CustomFormatter(has_color_support(sys.stdout)))
root_logger.addHandler(shell_handler)


def set_detailed_logs(detailed):
    """Set or unset the shell logs to detailed."""
    color = has_color_support(sys.stdout)
    formatter = DetailedFormatter(color) \
        if detailed else CustomFormatter(color)
    shell_handler.setFormatter(formatter)


def initialize_logging(component, log_dir=None, file_log_debug=False):
    """Tag the records with the component and log them to a file too.

    component (string): the name of the tool, used in the log lines
        and as name of the log file.
    log_dir (string|None): the directory for the log file; None to
        use the one in the configuration.
    file_log_debug (bool): whether to include debug messages in the
        file.

    """
    if log_dir is None:
        from dropproject.conf import config
        log_dir = config.global_.log_dir
        file_log_debug = config.global_.file_log_debug

    component_filter = ComponentFilter(component)
    shell_handler.addFilter(component_filter)

    os.makedirs(log_dir, exist_ok=True)
    file_handler = FileHandler(os.path.join(log_dir, "%s.log" % component),
                               mode="a", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG if file_log_debug else logging.INFO)
    file_handler.setFormatter(DetailedFormatter(False))
    file_handler.addFilter(component_filter)
    root_logger.addHandler(file_handler)
    return file_handler
