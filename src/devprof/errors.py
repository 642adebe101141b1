from __future__ import annotations


class DevprofError(RuntimeError):
    """Base class for profiling session and report errors."""


class NoActiveSessionError(DevprofError):
    """A stop was requested but no session was started."""


class SessionAlreadyActiveError(DevprofError):
    """A start was requested while a session is still running."""


class DirectoryAccessError(DevprofError):
    """The report directory could not be cleared or created."""


class ReportWriteError(DevprofError):
    """The report writer failed while persisting a profile result."""


class ViewerLaunchError(DevprofError):
    """The report viewer binary is missing or could not be spawned."""


class NoReportFoundError(DevprofError):
    """No callgrind report exists in the report directory."""


class ProfilingDisabledError(DevprofError):
    """Profiling was not installed for this application."""


class MetadataError(DevprofError):
    """Report metadata is missing or does not match its schema."""
