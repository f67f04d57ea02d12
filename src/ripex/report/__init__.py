"""Report builders for the ripex CLI.

:mod:`ripex.report.rpki` renders routing consistency and RPKI validity
per AS as pandoc-flavoured Markdown or CSV.
"""

from ripex.report.rpki import build_csv, build_report, table

__all__ = ["build_csv", "build_report", "table"]
