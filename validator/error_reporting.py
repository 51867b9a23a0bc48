"""
Verdict Reporting for the CashToken Validator

This module renders VerdictReports for people and tools: wallet builders,
the CLI, and logs.

Features:
- Multiple output formats (text, JSON, Markdown, table, CSV)
- Reporting levels controlling how much diagnostic detail is shown
- Aggregate summaries across batches of transactions
"""

import csv
import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from io import StringIO
from typing import Any, Dict, List, Optional, Tuple

from tabulate import tabulate

from .report import VerdictReport


class ErrorReportingLevel(Enum):
    """Error reporting levels."""
    MINIMAL = "minimal"        # Verdicts and violations
    STANDARD = "standard"      # Plus burns
    DETAILED = "detailed"      # Plus advisory warnings


class ReportFormat(Enum):
    """Available report formats."""
    TEXT = "text"
    JSON = "json"
    MARKDOWN = "markdown"
    TABLE = "table"
    CSV = "csv"


@dataclass
class ReportSummary:
    """Summary statistics over a batch of verdicts."""
    total_transactions: int
    accepted: int
    rejected: int
    by_code: Dict[str, int] = field(default_factory=dict)
    most_common_codes: List[Tuple[str, int]] = field(default_factory=list)


class ErrorReporter:
    """
    Renders verdict reports in several formats.
    
    The reporter holds only its configuration; rendering never mutates the
    reports it is given.
    """
    
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize error reporter.
        
        Args:
            config: Optional configuration dictionary
        """
        self.config = config or {}
        self.logger = logging.getLogger(__name__)
        self.reporting_level = ErrorReportingLevel(
            self.config.get("reporting_level", "standard")
        )
    
    @property
    def include_burns(self) -> bool:
        return self.reporting_level != ErrorReportingLevel.MINIMAL
    
    @property
    def include_warnings(self) -> bool:
        return self.reporting_level == ErrorReportingLevel.DETAILED
    
    def get_summary(self, reports: List[VerdictReport]) -> ReportSummary:
        """Summarize verdicts and violation codes over a batch."""
        codes = Counter(code for report in reports for code in report.violation_codes)
        accepted = sum(1 for report in reports if report.accepted)
        
        return ReportSummary(
            total_transactions=len(reports),
            accepted=accepted,
            rejected=len(reports) - accepted,
            by_code=dict(codes),
            most_common_codes=codes.most_common(5)
        )
    
    def generate_report(self,
                        reports: List[VerdictReport],
                        format_type: ReportFormat = ReportFormat.TEXT,
                        output_path: Optional[str] = None) -> str:
        """
        Render verdict reports.
        
        Args:
            reports: Verdicts to render
            format_type: Output format
            output_path: Optional path to also write the rendering to
            
        Returns:
            Rendered report
        """
        generators = {
            ReportFormat.TEXT: self._generate_text_report,
            ReportFormat.JSON: self._generate_json_report,
            ReportFormat.MARKDOWN: self._generate_markdown_report,
            ReportFormat.TABLE: self._generate_table_report,
            ReportFormat.CSV: self._generate_csv_report,
        }
        content = generators[format_type](reports)
        
        if output_path:
            self._save_report_to_file(content, output_path)
        
        return content
    
    def _filtered_dict(self, report: VerdictReport) -> Dict[str, Any]:
        data = report.to_dict()
        if not self.include_burns:
            data.pop("burns")
        if not self.include_warnings:
            data.pop("warnings")
        return data
    
    def _generate_text_report(self, reports: List[VerdictReport]) -> str:
        """Generate text format report."""
        summary = self.get_summary(reports)
        lines = []
        lines.append("CashToken Validation Report")
        lines.append("=" * 50)
        lines.append(f"Transactions: {summary.total_transactions} "
                     f"(accepted {summary.accepted}, rejected {summary.rejected})")
        lines.append("")
        
        for report in reports:
            verdict = "ACCEPTED" if report.accepted else "REJECTED"
            lines.append(f"Transaction {report.txid.hex()}: {verdict}")
            
            for violation in report.violations:
                lines.append(f"  [{violation.code}] {violation.message}")
            
            if self.include_burns:
                for category, record in report.burns.items():
                    lines.append(
                        f"  burn {category.hex()}: amount {record.amount_burned}, "
                        f"{len(record.nfts_burned)} NFT(s)"
                    )
            
            if self.include_warnings:
                for warning in report.warnings:
                    lines.append(f"  warning: {warning}")
            
            lines.append("")
        
        return "\n".join(lines)
    
    def _generate_json_report(self, reports: List[VerdictReport]) -> str:
        """Generate JSON format report."""
        summary = self.get_summary(reports)
        data = {
            "metadata": {
                "total_transactions": summary.total_transactions,
                "accepted": summary.accepted,
                "rejected": summary.rejected,
                "reporting_level": self.reporting_level.value
            },
            "reports": [self._filtered_dict(report) for report in reports]
        }
        return json.dumps(data, indent=2)
    
    def _generate_markdown_report(self, reports: List[VerdictReport]) -> str:
        """Generate Markdown format report."""
        summary = self.get_summary(reports)
        lines = []
        lines.append("# CashToken Validation Report")
        lines.append("")
        lines.append(f"- **Transactions:** {summary.total_transactions}")
        lines.append(f"- **Accepted:** {summary.accepted}")
        lines.append(f"- **Rejected:** {summary.rejected}")
        
        if summary.most_common_codes:
            lines.append("")
            lines.append("## Most Common Violations")
            for code, count in summary.most_common_codes:
                lines.append(f"- **{code}:** {count}")
        
        for report in reports:
            lines.append("")
            verdict = "accepted" if report.accepted else "rejected"
            lines.append(f"## `{report.txid.hex()}` ({verdict})")
            
            if report.violations:
                lines.append("")
                for violation in report.violations:
                    lines.append(f"- **{violation.code}:** {violation.message}")
            
            if self.include_burns and report.burns:
                lines.append("")
                lines.append("| Category | Amount burned | NFTs burned |")
                lines.append("|---|---|---|")
                for category, record in report.burns.items():
                    lines.append(
                        f"| `{category.hex()}` | {record.amount_burned} | {len(record.nfts_burned)} |"
                    )
            
            if self.include_warnings and report.warnings:
                lines.append("")
                for warning in report.warnings:
                    lines.append(f"> {warning}")
        
        return "\n".join(lines)
    
    def _generate_table_report(self, reports: List[VerdictReport]) -> str:
        """Generate a plain table with one row per transaction."""
        rows = [report.get_summary() for report in reports]
        if not self.include_burns:
            for row in rows:
                row.pop("burned_categories")
        if not self.include_warnings:
            for row in rows:
                row.pop("warnings")
        return tabulate(rows, headers="keys", tablefmt="simple")
    
    def _generate_csv_report(self, reports: List[VerdictReport]) -> str:
        """Generate CSV format report with one row per violation."""
        output = StringIO()
        writer = csv.writer(output)
        
        writer.writerow(["txid", "accepted", "code", "message"])
        
        for report in reports:
            if not report.violations:
                writer.writerow([report.txid.hex(), report.accepted, "", ""])
            for violation in report.violations:
                writer.writerow([report.txid.hex(), report.accepted, violation.code, violation.message])
        
        return output.getvalue()
    
    def _save_report_to_file(self, content: str, output_path: str) -> None:
        """Save report content to file."""
        with open(output_path, 'w') as f:
            f.write(content)
        self.logger.info(f"Report saved to {output_path}")
