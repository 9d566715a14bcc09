"""Blob sinks that receive the exported currency snapshot."""

from fx_bnr.export.sinks import BlobSink, LocalDirectorySink, S3BlobSink, write_scratch_file

__all__ = ["BlobSink", "LocalDirectorySink", "S3BlobSink", "write_scratch_file"]
